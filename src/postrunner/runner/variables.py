"""
PostRunner Variable Substitution

Applies collection variables to {{name}} placeholders before a request is sent.
"""

import re
from typing import Dict, Optional


PLACEHOLDER_PATTERN = re.compile(r'\{\{\s*([^{}\s]+)\s*\}\}')


class VariableSubstitutor:
    """
    Substitute collection variables in request strings.

    Unknown placeholders are left as written.

    Example:
        substitutor = VariableSubstitutor({'baseUrl': 'https://api.example.com'})
        substitutor.substitute('{{baseUrl}}/users')  # https://api.example.com/users
    """

    def __init__(self, variables: Optional[Dict[str, str]] = None):
        """
        Initialize substitutor.

        Args:
            variables: Dict mapping variable names to values
        """
        self.variables = variables or {}

    def substitute(self, text: Optional[str]) -> Optional[str]:
        """Substitute all known variables in a string."""
        if not text or not self.variables:
            return text

        def replace(match):
            name = match.group(1)
            if name in self.variables:
                return self.variables[name]
            return match.group(0)

        return PLACEHOLDER_PATTERN.sub(replace, text)

    def substitute_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Substitute variables in header values."""
        return {
            k: self.substitute(v) if isinstance(v, str) else v
            for k, v in headers.items()
        }
