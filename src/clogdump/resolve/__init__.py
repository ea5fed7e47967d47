from .enums import EnumResolver
from .params import ABSENT, ParameterResolver

__all__ = ["ABSENT", "EnumResolver", "ParameterResolver"]
