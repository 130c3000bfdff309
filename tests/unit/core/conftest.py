"""Shared fixtures for core unit tests"""

import pytest
from markdown_it import MarkdownIt

from mdbridge.config import ConversionConfig, HTML_TO_MARKDOWN
from mdbridge.core.html_tree import StandardTreeBuilder
from mdbridge.core.render_md import render_markdown


SAMPLE_MD = """\
# Project Status

This is a paragraph with **bold** and *italic* text.

## Tasks
- [x] Setup project
- [ ] Write documentation

## Team

| Name | Role | Status |
|------|------|--------|
| John | Developer | Active |
| Jane | Designer | Active |

```python
print("hello")
```

> Quoted line

---

Footer paragraph with a [link](https://example.com "Example").
"""

SAMPLE_HTML = """\
<h1>Advanced HTML Document</h1>
<p>This is a paragraph with <strong>bold</strong>, <em>italic</em>, and <code>inline code</code>.</p>

<h2>Features List</h2>
<ul>
  <li>Regular list item</li>
  <li>Item with <a href="https://example.com" title="Example Site">nested link</a></li>
  <li>
    Nested list:
    <ul>
      <li>Nested item 1</li>
      <li>Nested item 2</li>
    </ul>
  </li>
</ul>

<h3>Task List</h3>
<ul class="task-list">
  <li class="task-list-item"><input type="checkbox" checked disabled> Completed task</li>
  <li class="task-list-item"><input type="checkbox" disabled> Pending task</li>
</ul>

<h3>Data Table</h3>
<table>
  <thead>
    <tr>
      <th>Name</th>
      <th>Role</th>
      <th>Status</th>
    </tr>
  </thead>
  <tbody>
    <tr>
      <td>John Doe</td>
      <td>Developer</td>
      <td><strong>Active</strong></td>
    </tr>
    <tr>
      <td>Jane Smith</td>
      <td>Designer</td>
      <td><em>On Leave</em></td>
    </tr>
  </tbody>
</table>

<blockquote>
  <p>This is an important quote that contains <strong>formatted text</strong>.</p>
</blockquote>

<pre><code class="language-javascript">function greet(name) {
  return name;
}</code></pre>

<hr>

<p>Image with title: <img src="diagram.png" alt="System Diagram" title="Architecture Overview" /></p>
"""


@pytest.fixture(name="config")
def config_fixture():
    return ConversionConfig()


@pytest.fixture(name="reverse_config")
def reverse_config_fixture():
    return ConversionConfig(mode=HTML_TO_MARKDOWN)


@pytest.fixture(name="to_md")
def to_md_fixture(reverse_config):
    """Parse HTML with the standard builder and render it as Markdown."""
    def _to_md(html: str, config: ConversionConfig = None) -> str:
        return render_markdown(StandardTreeBuilder().build(html), config or reverse_config)
    return _to_md


@pytest.fixture(name="commonmark")
def commonmark_fixture():
    return MarkdownIt("commonmark")


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="sample_html")
def sample_html_fixture():
    return SAMPLE_HTML
