from .luhn import LuhnMod10Validator, LuhnMod25Validator
from .rules import VALIDATORS, CompiledRule, compile_descriptor_rule, compile_rule

__all__ = [
    "VALIDATORS",
    "CompiledRule",
    "compile_rule",
    "compile_descriptor_rule",
    "LuhnMod10Validator",
    "LuhnMod25Validator",
]
