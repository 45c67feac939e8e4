from roadmap_chat.dependency_injection.container import build_container

__all__ = ["build_container"]
