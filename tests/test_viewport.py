"""Tests for the pinhole viewport."""
import math

import numpy as np
import pytest

from orrery.core.config import RENDER_CFG
from orrery.render.camera import CameraPose
from orrery.render.viewport import Viewport

FOCAL = 400.0 / math.tan(math.radians(RENDER_CFG.fov_deg) / 2.0)


@pytest.fixture
def viewport():
    view = Viewport((1000, 800))
    view.set_pose(
        CameraPose(
            position=np.array([-1.0, 0.0, 0.0]),
            up=np.array([0.0, 0.0, 1.0]),
            look_at=np.zeros(3),
            radius=1.0,
        )
    )
    return view


class TestViewport:

    def test_focal_length(self, viewport):
        assert viewport.focal_length == pytest.approx(FOCAL)

    def test_look_at_lands_in_the_centre(self, viewport):
        assert viewport.world_to_screen([0.0, 0.0, 0.0]) == (500, 400)

    def test_up_is_up_on_screen(self, viewport):
        assert viewport.world_to_screen([0.0, 0.0, 0.1]) == (500, round(400 - 0.1 * FOCAL))

    def test_left_handed_screen_x(self, viewport):
        assert viewport.world_to_screen([0.0, 0.1, 0.0]) == (round(500 - 0.1 * FOCAL), 400)

    def test_points_behind_are_dropped(self, viewport):
        assert viewport.world_to_screen([-2.0, 0.0, 0.0]) is None
        assert viewport.projected_radius([-2.0, 0.0, 0.0], 1.0) == 0.0

    def test_projected_radius(self, viewport):
        assert viewport.projected_radius([0.0, 0.0, 0.0], 0.1) == pytest.approx(0.1 * FOCAL)
        assert viewport.depth([1.0, 5.0, 5.0]) == pytest.approx(2.0)

    def test_polyline_skips_hidden_vertices(self, viewport):
        points = np.array([[0.0, 0.0, 0.0], [-3.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        assert viewport.project_polyline(points) == [(500, 400), (500, 400)]

    def test_degenerate_pose_is_ignored(self, viewport):
        viewport.set_pose(CameraPose(np.zeros(3), np.array([0.0, 0.0, 1.0]), np.zeros(3), 0.0))
        np.testing.assert_array_equal(viewport.position, [-1.0, 0.0, 0.0])

    def test_looking_along_up_still_projects(self):
        view = Viewport((200, 200))
        view.set_pose(CameraPose(np.array([0.0, 0.0, 2.0]), np.array([0.0, 0.0, 1.0]), np.zeros(3), 2.0))
        assert view.world_to_screen([0.0, 0.0, 0.0]) == (100, 100)

    def test_resize(self, viewport):
        viewport.update_size((400, 300))
        assert viewport.size == (400, 300)
        assert viewport.world_to_screen([0.0, 0.0, 0.0]) == (200, 150)
