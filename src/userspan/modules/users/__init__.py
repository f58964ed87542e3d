"""Users module: traced user lookup."""

from fastapi import APIRouter


router = APIRouter(prefix="/users", tags=["users"])


# Module metadata
__module__ = {
    "name": "users",
    "version": "1.0.0",
    "description": "Traced user lookup",
    "dependencies": [],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from userspan.modules.users import routes  # noqa: F401
