"""
Tests for PageActions and DOMSimplifier.
"""

import pytest

from llm_task_agent.exceptions import AtomicActionError
from llm_task_agent.tools.browser import DOMSimplifier, PageActions, SimplifiedElement
from llm_task_agent.tools.browser.page_actions import normalize_url, parse_wait_ms
from llm_task_agent.tools.browser.schemas import AtomicMethod, ElementAction, ElementSelection

ELEMENTS = [
    {"tag": "input", "selector": "[id=\"email\"]", "id": "email", "type": "email", "placeholder": "Email"},
    {"tag": "button", "selector": "[id=\"login\"]", "id": "login", "text": "Log in"},
    {"tag": "select", "selector": "select[name=\"size\"]", "name": "size"},
]


@pytest.fixture
def actions(fake_page, oracle):
    fake_page.elements = list(ELEMENTS)
    return PageActions(fake_page, oracle, model="browser-model", max_html_chars=1000)


class TestHelpers:
    """Test URL and wait parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("example.com", "https://example.com"),
        ("  http://example.com ", "http://example.com"),
        ("https://example.com/a", "https://example.com/a"),
        ("about:blank", "about:blank"),
    ])
    def test_normalize_url(self, raw, expected):
        assert normalize_url(raw) == expected

    @pytest.mark.parametrize("instruction,expected", [
        ("500", 500),
        ("wait 2000 ms", 2000),
        (None, 1000),
        ("a moment", 1000),
        ("999999", 30000),
    ])
    def test_parse_wait_ms(self, instruction, expected):
        assert parse_wait_ms(instruction) == expected


class TestDOMSimplifier:
    """Test element extraction and formatting."""

    @pytest.mark.asyncio
    async def test_interactive_elements(self, fake_page):
        """Test raw elements are indexed in page order."""
        fake_page.elements = list(ELEMENTS)

        elements = await DOMSimplifier(max_elements=50).interactive_elements(fake_page)

        assert [e.index for e in elements] == [0, 1, 2]
        assert elements[1].text == "Log in"
        assert fake_page.calls[-1][1] == 50

    def test_to_line(self):
        """Test compact rendering carries the useful attributes."""
        element = SimplifiedElement(index=3, tag="input", selector="#q", name="q", placeholder="Search")
        assert element.to_line() == '[3] <input> name=q placeholder="Search"'

    def test_to_dict_drops_empty(self):
        """Test empty attributes are omitted."""
        element = SimplifiedElement.from_raw(0, {"tag": "a", "selector": "#x", "href": "/home", "text": ""})
        assert element.to_dict() == {"index": 0, "tag": "a", "selector": "#x", "href": "/home"}

    def test_format_no_elements(self):
        assert DOMSimplifier.format_elements([]) == "No interactive elements found."


class TestPageActions:
    """Test each atomic method against the fake page."""

    @pytest.mark.asyncio
    async def test_goto(self, actions, fake_page):
        """Test GOTO normalizes the URL and waits for commit."""
        await actions.run(AtomicMethod.GOTO, "example.com")

        assert fake_page.url == "https://example.com"
        assert fake_page.calls[0][2]["wait_until"] == "commit"

    @pytest.mark.asyncio
    async def test_goto_requires_url(self, actions):
        with pytest.raises(AtomicActionError):
            await actions.run(AtomicMethod.GOTO, None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("choice,expected", [
        (ElementAction(index=1, action="click"), ("click", "[id=\"login\"]")),
        (ElementAction(index=0, action="fill", value="a@b.c"), ("fill", "[id=\"email\"]", "a@b.c")),
        (ElementAction(index=0, action="press"), ("press", "[id=\"email\"]", "Enter")),
        (ElementAction(index=1, action="hover"), ("hover", "[id=\"login\"]")),
        (ElementAction(index=2, action="select", value="L"), ("select_option", "select[name=\"size\"]", "L")),
    ])
    async def test_act(self, actions, fake_page, oracle, choice, expected):
        """Test ACT performs the interaction the oracle picked."""
        oracle.push(choice)

        performed = await actions.run(AtomicMethod.ACT, "do the thing")

        assert expected in fake_page.calls
        assert performed.startswith(choice.action)
        prompt = oracle.calls[0]["messages"][-1].content
        assert "do the thing" in prompt
        assert '[1] <button> id=login "Log in"' in prompt

    @pytest.mark.asyncio
    async def test_act_index_out_of_range(self, actions, oracle):
        """Test an invalid element index fails the action."""
        oracle.push(ElementAction(index=9))

        with pytest.raises(AtomicActionError, match="out of range"):
            await actions.run(AtomicMethod.ACT, "click it")

    @pytest.mark.asyncio
    async def test_extract_truncates_html(self, actions, fake_page, oracle):
        """Test EXTRACT sends truncated HTML and returns the oracle text."""
        fake_page.html = "<p>" + "x" * 5000 + "</p>"
        oracle.push_text("the value")

        assert await actions.run(AtomicMethod.EXTRACT, "the value") == "the value"
        prompt = oracle.calls[0]["messages"][-1].content
        assert "x" * 1001 not in prompt
        assert oracle.calls[0]["model"] == "browser-model"

    @pytest.mark.asyncio
    async def test_observe_filters_with_instruction(self, actions, oracle):
        """Test OBSERVE narrows elements to the oracle's selection."""
        oracle.push(ElementSelection(indices=[1]))

        observed = await actions.run(AtomicMethod.OBSERVE, "login controls")

        assert [e["id"] for e in observed] == ["login"]

    @pytest.mark.asyncio
    async def test_observe_without_instruction(self, actions, oracle):
        """Test OBSERVE without instruction lists everything without the oracle."""
        observed = await actions.run(AtomicMethod.OBSERVE, None)

        assert len(observed) == 3
        assert oracle.calls == []

    @pytest.mark.asyncio
    async def test_screenshot_is_base64(self, actions):
        """Test SCREENSHOT returns base64 text."""
        assert await actions.run(AtomicMethod.SCREENSHOT) == "iVBORyBmYWtl"

    @pytest.mark.asyncio
    async def test_close_is_not_executable(self, actions):
        """Test CLOSE is handled by the loop, never executed."""
        with pytest.raises(AtomicActionError, match="Unsupported"):
            await actions.run(AtomicMethod.CLOSE)

    @pytest.mark.asyncio
    async def test_page_errors_wrapped(self, actions, fake_page):
        """Test page exceptions become AtomicActionError with the method."""
        fake_page.goto_error = RuntimeError("timeout")

        with pytest.raises(AtomicActionError) as exc_info:
            await actions.run(AtomicMethod.GOTO, "https://example.com")
        assert exc_info.value.method == "GOTO"
        assert exc_info.value.instruction == "https://example.com"
