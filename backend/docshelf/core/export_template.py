"""
HTML template used to render documents for PDF export.
"""

from datetime import datetime
from html import escape

EXPORT_STYLESHEET = """
body {
  font-family: Arial, sans-serif;
  line-height: 1.6;
  color: #333;
  max-width: 800px;
  margin: 0 auto;
  padding: 20px;
}
h1 { font-size: 28px; margin-bottom: 10px; }
h2 { font-size: 24px; margin-top: 30px; margin-bottom: 15px; }
h3 { font-size: 20px; margin-top: 25px; margin-bottom: 10px; }
p { margin-bottom: 15px; }
.subtitle { font-size: 18px; color: #666; margin-bottom: 30px; }
.metadata {
  font-size: 14px;
  color: #666;
  margin-bottom: 30px;
  border-bottom: 1px solid #eee;
  padding-bottom: 20px;
}
code {
  background-color: #f5f5f5;
  padding: 2px 5px;
  border-radius: 3px;
  font-family: monospace;
}
pre {
  background-color: #f5f5f5;
  padding: 15px;
  border-radius: 5px;
  overflow-x: auto;
  font-family: monospace;
}
blockquote { border-left: 4px solid #ddd; padding-left: 15px; color: #666; margin-left: 0; }
img { max-width: 100%; height: auto; }
table { border-collapse: collapse; width: 100%; margin-bottom: 20px; }
table, th, td { border: 1px solid #ddd; }
th, td { padding: 12px; text-align: left; }
th { background-color: #f5f5f5; }
.footer {
  margin-top: 50px;
  padding-top: 20px;
  border-top: 1px solid #eee;
  font-size: 12px;
  color: #666;
  text-align: center;
}
"""

UNCATEGORIZED = "Uncategorized"


def build_export_html(
    title: str,
    content_html: str,
    author_name: str,
    updated_at: datetime,
    subtitle: str | None = None,
    category_name: str | None = None,
    generated_at: datetime | None = None,
) -> str:
    """
    Build a self-contained HTML page for one document.

    Args:
        title: Document title (escaped)
        content_html: Document body markup, embedded as given
        author_name: Display name of the author (escaped)
        updated_at: Last-updated timestamp shown in the metadata block
        subtitle: Optional subtitle (escaped)
        category_name: Category name, "Uncategorized" when absent (escaped)
        generated_at: Timestamp used for the footer year

    Returns:
        Complete HTML document string
    """
    year = (generated_at or updated_at).year
    subtitle_block = f'<div class="subtitle">{escape(subtitle)}</div>' if subtitle else ""

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(title)}</title>
  <style>{EXPORT_STYLESHEET}</style>
</head>
<body>
  <h1>{escape(title)}</h1>
  {subtitle_block}
  <div class="metadata">
    <div>Author: {escape(author_name)}</div>
    <div>Category: {escape(category_name or UNCATEGORIZED)}</div>
    <div>Last Updated: {updated_at.strftime("%Y-%m-%d")}</div>
  </div>
  <div class="content">
    {content_html}
  </div>
  <div class="footer">
    Generated from Docshelf
    <br>
    &copy; {year} Docshelf. All rights reserved.
  </div>
</body>
</html>
"""
