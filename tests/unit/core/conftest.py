"""Shared fixtures for core unit tests"""

import pytest

from metamark.core.cursor import TokenCursor
from metamark.core.scanner import scan


SAMPLE_MMK = """\
---
title: Sample
tags:
- a
- b
---

# Sample Heading @[note: first]

Intro with **bold**, *italic*, `code`, [a link](https://example.com) and $x^2$.

[[component: card theme="dark"]]
## Inside
- one
- two
  - deeper
[[/component]]

%% a comment

```python
print("hi")
```

```mermaid
graph TD;
```

$$\\sum_i x_i$$
"""

NESTED_LIST_MMK = """\
1. First
2. Second
   - Nested
   - Another
3. Third
"""


@pytest.fixture(name="sample_text")
def sample_text_fixture():
    return SAMPLE_MMK


@pytest.fixture(name="nested_list_text")
def nested_list_text_fixture():
    return NESTED_LIST_MMK


@pytest.fixture(name="cursor_for")
def cursor_for_fixture():
    """Factory: build a TokenCursor over the given text."""
    def _make(text: str) -> TokenCursor:
        return TokenCursor(scan(text))
    return _make
