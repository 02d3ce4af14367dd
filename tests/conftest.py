"""
conftest.py
-----------
Shared pytest fixtures for oneiro tests.

Provides fixtures for:
- Temporary directories
- Sample journal notes (nested, flat, broken)
- Settings and a fixed "today"
"""
import pytest
from pathlib import Path
from datetime import date
from tempfile import TemporaryDirectory

from oneiro.pipeline.configs.settings import EngineSettings


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- Settings Fixtures -----

@pytest.fixture
def settings():
    """Default engine settings."""
    return EngineSettings()


@pytest.fixture
def today():
    """Fixed processing date for fallback resolution."""
    return date(2030, 1, 1)


# ----- Sample Journal Content Fixtures -----

@pytest.fixture
def journal_note():
    """Journal note with one entry holding two dreams."""
    return """---
created: 20240101
---

# June 2025

> [!journal-entry] Sunday, June 15th, 2025 ^20250615
> Woke up twice during the night.
>
>> [!dream-diary|mood=calm] Flying [[Dreams/Flying|over the sea]] ^flying
>> We were **gliding** above the harbour, see [[Harbour|the old port]].
>> ![[harbour.png|400]]
>>
>> The water turned to glass.
>>
>>> [!dream-metrics]
>>> Words: 343, Sensory Detail: 4, emotional recall: 3, Lost Segments: —
>
>> [!dream-diary] Lost keys
>> I searched every drawer for my keys.
>>> [!dream-metrics]
>>> Sensory Detail: 2, Emotional Recall: 5, Lucidity: 1
"""


@pytest.fixture
def second_note():
    """Journal note dated only through front matter."""
    return """---
created: 20250610
---

> [!journal-entry] Tuesday notes
>> [!dream-diary] Train
>> A train with no conductor.
>>> [!dream-metrics]
>>> Sensory Detail: 3, Emotional Recall: 2
"""


@pytest.fixture
def no_diary_note():
    """Journal note with an entry but no dreams."""
    return """> [!journal-entry] Monday, June 16th, 2025
> Slept without dreams.
"""


@pytest.fixture
def write_note(tmp_dir):
    """Factory writing a note under the temporary directory."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
