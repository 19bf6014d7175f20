from .team import validate_team, validate_set, check_team
from .config import audit_configuration

__all__ = ["validate_team","validate_set","check_team","audit_configuration"]
