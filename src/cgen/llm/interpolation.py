"""
Interpolation of ``$NAME`` tokens in provider URLs and headers.

Templates such as ``https://host/models/$ACR_MODEL?key=$ACR_API_KEY`` are
resolved against a variable mapping assembled fresh for every request from
the process environment and the active preset.

"""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Mapping

	from cgen.presets.models import Preset

VARIABLE_PREFIX = "ACR_"
TOKEN_PATTERN = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")


def interpolate(template: str, variables: Mapping[str, str]) -> str:
	"""
	Replace ``$NAME`` tokens in ``template`` with values from ``variables``.

	Unknown tokens are left in place verbatim and substituted values are not
	scanned again.

	Args:
	    template: Text possibly containing ``$NAME`` tokens
	    variables: Mapping of variable name to value

	Returns:
	    The interpolated text

	"""
	if "$" not in template:
		return template

	def _replace(match: re.Match[str]) -> str:
		value = variables.get(match.group(1))
		return match.group(0) if value is None else value

	return TOKEN_PATTERN.sub(_replace, template)


def build_variables(
	preset: Preset,
	environ: Mapping[str, str] | None = None,
	extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
	"""
	Assemble the variable mapping for one request.

	The process environment comes first, then ``extra`` values, then the
	preset's ``ACR_PROVIDER``, ``ACR_MODEL`` and ``ACR_API_KEY``, so resolved
	configuration always wins over same-named environment variables.

	Args:
	    preset: The preset being attempted
	    environ: Environment to read, defaults to ``os.environ``
	    extra: Additional call-level variables, e.g. ``ACR_LOCALE``

	Returns:
	    A new dictionary safe to mutate

	"""
	variables = dict(os.environ if environ is None else environ)
	if extra:
		variables.update(extra)
	variables[f"{VARIABLE_PREFIX}PROVIDER"] = preset.provider
	variables[f"{VARIABLE_PREFIX}MODEL"] = preset.model
	variables[f"{VARIABLE_PREFIX}API_KEY"] = preset.api_key
	return variables
