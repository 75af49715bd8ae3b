"""Shared documents for the html_entry tests."""

import pytest

from html_entry.document import parse_document

ITEMS_HTML = """
<html><body>
  <div class="list">
    <div class="item"><h2> First </h2><span class="votes">10</span></div>
    <div class="item"><h2>Second</h2><span class="votes">20</span></div>
    <div class="item"><h2>Third </h2><span class="votes">30</span></div>
  </div>
</body></html>
"""

VOTES_HTML = """
<html><body>
  <ul>
    <li><h3>alpha</h3><span class="vote-up">5</span><span class="vote-down">1</span></li>
    <li><h3>beta</h3><span class="vote-up">7</span><span class="vote-down">4</span></li>
  </ul>
  <ul class="tags">
    <li class="tag"><a href="/t/python">python</a></li>
    <li class="tag"><a href="/t/html">html</a></li>
    <li class="tag"><a href="/t/xml">xml</a></li>
  </ul>
</body></html>
"""


@pytest.fixture
def items_document():
    return parse_document(ITEMS_HTML)


@pytest.fixture
def votes_document():
    return parse_document(VOTES_HTML)
