from .control_service import ControlService

__all__ = ["ControlService"]
