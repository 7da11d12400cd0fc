"""Services initialization."""
from src.services.checklist_master import ChecklistMaster, get_checklist_master
from src.services.inspection_engine import InspectionEngine
from src.services.persistence import InspectionRepository, get_inspection_repository
from src.services.inspection_sessions import InspectionSessionManager, get_session_manager

__all__ = [
    "ChecklistMaster",
    "get_checklist_master",
    "InspectionEngine",
    "InspectionRepository",
    "get_inspection_repository",
    "InspectionSessionManager",
    "get_session_manager",
]
