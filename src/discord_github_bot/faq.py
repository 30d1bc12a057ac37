"""
FAQ catalog for the /faq command.

The FAQ file is YAML with two lists of `{name, url}` entries:

```yaml
faq:
  - name: Getting started
    url: https://example.org/docs/getting-started
software_modules:
  - name: Range test
    url: https://example.org/docs/modules/range-test
```
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from discord_github_bot.utils.exceptions import ConfigurationError


# Discord accepts at most 25 autocomplete choices.
MAX_CHOICES = 25


class FAQItem(BaseModel):
    name: str
    url: str


class FAQCatalog(BaseModel):
    """All FAQ entries, general questions first, then software modules."""

    faq: List[FAQItem] = Field(default_factory=list)
    software_modules: List[FAQItem] = Field(default_factory=list)

    def all_items(self) -> List[FAQItem]:
        return [*self.faq, *self.software_modules]

    def find(self, name: str) -> Optional[FAQItem]:
        """Return the entry named exactly `name`."""
        for item in self.all_items():
            if item.name == name:
                return item
        return None

    def suggest(self, query: str, limit: int = MAX_CHOICES) -> List[str]:
        """Names containing `query` (case-insensitive), at most `limit`."""
        needle = query.lower()
        names = []
        for item in self.all_items():
            if needle and needle not in item.name.lower():
                continue
            names.append(item.name)
            if len(names) >= limit:
                break
        return names


def load_faq(path: Path) -> FAQCatalog:
    """
    Load the FAQ catalog from YAML.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
        return FAQCatalog.model_validate(yaml.safe_load(raw) or {})
    except OSError as e:
        raise ConfigurationError(
            "Failed to read FAQ file",
            context={"path": str(path)},
            original_error=e,
        )
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigurationError(
            "Failed to parse FAQ YAML",
            context={"path": str(path)},
            original_error=e,
        )
