"""Patch the webpack HTML template into a vite ``index.html``.

Webpack injects the bundle into the HTML template at build time; vite
instead needs an explicit module script pointing at the entry.
"""

import re
from pathlib import Path

from wp2vite.core.errors import EntryNotFound, HtmlTemplateNotFound

HTML_OUTPUT = "index.html"
HTML_CANDIDATES = ("public/index.html", "index.html")

# Template placeholders of CRA (%PUBLIC_URL%) and Vue CLI (<%= ... %>)
_PUBLIC_URL = re.compile(r'%PUBLIC_URL%/?')
_BASE_URL = re.compile(r'<%=\s*BASE_URL\s*%>')
_TITLE = re.compile(r'<%=\s*htmlWebpackPlugin\.options\.title\s*%>')
_BODY_CLOSE = re.compile(r'</body\s*>', re.IGNORECASE)


def find_html_template(root: Path, override: str | None = None) -> Path:
    """Return the HTML template to patch.

    Raises:
        HtmlTemplateNotFound: If no candidate exists
    """
    candidates = [override] if override else list(HTML_CANDIDATES)
    for candidate in candidates:
        path = root / candidate
        if path.is_file():
            return path
    raise HtmlTemplateNotFound(
        f"No HTML template found under {root} (tried: {', '.join(candidates)})"
    )


def _module_script(entry: str) -> str:
    return f'<script type="module" src="{entry}"></script>'


def patch_html(html: str, entry: str, title: str = "") -> str:
    """Resolve template placeholders and add the module script for ``entry``.

    Running it again on its own output does not add a second script tag.
    """
    result = _PUBLIC_URL.sub("/", html)
    result = _BASE_URL.sub("/", result)
    result = _TITLE.sub(title, result)

    tag = _module_script(entry)
    if tag in result:
        return result

    match = _BODY_CLOSE.search(result)
    if match is None:
        return result.rstrip("\n") + "\n" + tag + "\n"

    line_start = result.rfind("\n", 0, match.start()) + 1
    indent = result[line_start:match.start()]
    if indent.strip():
        # </body> shares its line with other markup
        return result[:match.start()] + tag + result[match.start():]
    return result[:line_start] + f"{indent}  {tag}\n" + result[line_start:]


def build_index_html(
    root: Path,
    entry: str | None,
    title: str,
    template: str | None = None,
) -> str:
    """Produce the patched index.html content for the primary entry.

    Raises:
        EntryNotFound: If there is no primary entry
        HtmlTemplateNotFound: If no template exists
    """
    if not entry:
        raise EntryNotFound(
            "No entry module found in the bundler config; cannot patch index.html"
        )
    template_path = find_html_template(root, template)
    return patch_html(template_path.read_text(encoding="utf-8"), entry, title)
