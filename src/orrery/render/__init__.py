"""Camera, projection and drawing helpers for the orrery."""

from .camera import CameraController, CameraPose, orbit_basis, orbit_pose
from .collision import CollisionSphere, make_collision_resolver, safe_orbit_radius
from .sequencer import (
    CameraPhase,
    CameraState,
    ScriptedSequence,
    Vantage,
    vantage_for_progress,
)
from .viewport import Viewport

__all__ = [
    "CameraController",
    "CameraPhase",
    "CameraPose",
    "CameraState",
    "CollisionSphere",
    "ScriptedSequence",
    "Vantage",
    "Viewport",
    "make_collision_resolver",
    "orbit_basis",
    "orbit_pose",
    "safe_orbit_radius",
    "vantage_for_progress",
]
