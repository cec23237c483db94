"""Scene providers: live entities, walls and visibility."""

from autocover.scene.local import LocalScene
from autocover.scene.protocol import SceneProvider, VisibilityProvider

__all__ = [
    "SceneProvider",
    "VisibilityProvider",
    "LocalScene",
]
