"""
Confirmation providers for interactive prompts.
"""
from typing import Callable

from ..core.interfaces.confirmation_provider import IConfirmationProvider

YELLOW = '\033[0;33m'
NC = '\033[0m'


class TerminalConfirmation(IConfirmationProvider):
    """Blocking console prompt. Only ``y`` or ``yes`` (any case) counts as consent."""
    
    def __init__(self, input_func: Callable[[str], str] = input):
        self._input = input_func
    
    def confirm(self, question: str) -> bool:
        try:
            response = self._input(f"{YELLOW}{question} (y/N): {NC}")
        except EOFError:
            return False
        return response.strip().lower() in ("y", "yes")


class AutoConfirm(IConfirmationProvider):
    """Answers every question with a fixed answer. Used for dry runs and tests."""
    
    def __init__(self, answer: bool = True):
        self.answer = answer
        self.questions = []
    
    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer
