from .analyzer_controller import router as analyzer_router


__all__ = ["analyzer_router"]
