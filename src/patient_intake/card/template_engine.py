"""HTML card template loading and personalization.

Templates are plain HTML with {{field_name}} placeholders. Values are HTML
escaped unless the field is declared raw (pre-rendered markup such as the
inline QR code SVG).
"""

import logging
import re
from html import escape as html_escape
from pathlib import Path
from typing import Any, Iterable

from patient_intake.utils.exceptions import MissingPlaceholderValueError, TemplateLoadError

logger = logging.getLogger(__name__)


class TemplateLoader:
    """Loads and caches card templates.

    Attributes:
        _cache: Dictionary mapping resolved file paths to template content
    """

    def __init__(self) -> None:
        self._cache: dict[str, str] = {}

    def load_from_file(self, file_path: Path) -> str:
        """Load an HTML template from file.

        Args:
            file_path: Path to the template

        Returns:
            Template content as UTF-8 string

        Raises:
            TemplateLoadError: If the file is missing, unreadable or not UTF-8
        """
        cache_key = str(file_path.resolve())
        if cache_key in self._cache:
            logger.debug(f"Cache hit for template: {file_path}")
            return self._cache[cache_key]

        logger.debug(f"Loading card template from file: {file_path}")

        try:
            content = file_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            error_msg = (
                f"Template file not found: {file_path}. "
                f"Check that the file path is correct and the file exists."
            )
            logger.error(error_msg)
            raise TemplateLoadError(error_msg) from e
        except PermissionError as e:
            error_msg = (
                f"Permission denied reading template file: {file_path}. "
                f"Check file permissions."
            )
            logger.error(error_msg)
            raise TemplateLoadError(error_msg) from e
        except UnicodeDecodeError as e:
            error_msg = (
                f"Template encoding error in {file_path}: {e}. "
                f"Ensure file is UTF-8 encoded."
            )
            logger.error(error_msg)
            raise TemplateLoadError(error_msg) from e

        self._cache[cache_key] = content
        return content

    def clear_cache(self) -> None:
        logger.debug(f"Clearing template cache ({len(self._cache)} entries)")
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)


class TemplatePersonalizer:
    """Replaces {{placeholder}} fields in HTML templates.

    Example:
        >>> personalizer = TemplatePersonalizer()
        >>> personalizer.personalize("<b>{{name}}</b>", {"name": "A & B"})
        '<b>A &amp; B</b>'
    """

    PLACEHOLDER_PATTERN = re.compile(r"{{(\w+)}}")

    def __init__(self, raw_fields: Iterable[str] = ()) -> None:
        """Initialize personalizer.

        Args:
            raw_fields: Field names inserted without HTML escaping
        """
        self.raw_fields = frozenset(raw_fields)

    def personalize(self, template: str, values: dict[str, Any]) -> str:
        """Substitute every placeholder in template.

        Raises:
            MissingPlaceholderValueError: If a placeholder has no value
        """
        placeholders = set(self.PLACEHOLDER_PATTERN.findall(template))
        missing = placeholders - values.keys()
        if missing:
            raise MissingPlaceholderValueError(
                f"Missing required placeholder values: {sorted(missing)}. "
                f"Ensure all required fields are provided in the values dictionary."
            )

        def replace(match: re.Match) -> str:
            field = match.group(1)
            value = "" if values[field] is None else str(values[field])
            if field in self.raw_fields:
                return value
            return html_escape(value, quote=True)

        return self.PLACEHOLDER_PATTERN.sub(replace, template)
