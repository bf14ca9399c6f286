from santa_sorter.services.matching import AssignmentError, InfeasibleError, solve
from santa_sorter.services.participants import Participant

__all__ = ["AssignmentError", "InfeasibleError", "Participant", "solve"]
