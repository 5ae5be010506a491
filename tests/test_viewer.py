"""Tests for the viewer's settings persistence and route helpers."""
import orrery_pygame
from orrery.data.bodies import BODY_DEFINITIONS


class TestSettings:

    def test_roundtrip(self, tmp_path, monkeypatch):
        monkeypatch.setattr(orrery_pygame, "SETTINGS_DIR", tmp_path / "cfg")
        monkeypatch.setattr(orrery_pygame, "SETTINGS_PATH", tmp_path / "cfg" / "settings.json")
        orrery_pygame.save_user_settings({"level": 3, "visited": ["Mars"]})
        assert orrery_pygame.load_user_settings() == {"level": 3, "visited": ["Mars"]}

    def test_missing_or_broken_file(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        monkeypatch.setattr(orrery_pygame, "SETTINGS_PATH", path)
        assert orrery_pygame.load_user_settings() == {}
        path.write_text("{not json", encoding="utf-8")
        assert orrery_pygame.load_user_settings() == {}
        path.write_text("[1, 2]", encoding="utf-8")
        assert orrery_pygame.load_user_settings() == {}


class TestRoute:

    def test_route_skips_the_star(self):
        route = orrery_pygame.travel_route()
        assert "Sun" not in route
        assert len(route) == len(BODY_DEFINITIONS) - 1

    def test_next_destination_wraps(self):
        route = orrery_pygame.travel_route()
        assert orrery_pygame.next_destination(route[0]) == route[1]
        assert orrery_pygame.next_destination(route[-1]) == route[0]
        assert orrery_pygame.next_destination("Sun") == route[0]
