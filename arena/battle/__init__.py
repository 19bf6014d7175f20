from .models import TeamSet, MoveUse, Participant

__all__ = ["TeamSet","MoveUse","Participant"]
