from . import user_input
from .user_input import NonInteractivePrompter, Prompter, RichPrompter
