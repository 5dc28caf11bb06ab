"""
Static pages written into per-slug folders.
"""

import html
import json

REDIRECT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Redirecting&hellip;</title>
    <meta name="robots" content="noindex">
    <meta http-equiv="refresh" content="0; url={target_attr}">
    <link rel="canonical" href="{target_attr}">
    <script>location.replace({target_js});</script>
  </head>
  <body>
    <p>Redirecting to <a href="{target_attr}">{target_text}</a></p>
  </body>
</html>
"""

PDF_VIEWER_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{title}</title>
    <style>
      html, body {{ margin: 0; height: 100%; font-family: sans-serif; }}
      header {{ display: flex; justify-content: space-between; align-items: center;
               padding: 0.5rem 1rem; background: #24292f; color: #fff; }}
      header a {{ color: #fff; }}
      object {{ display: block; width: 100%; height: calc(100% - 2.75rem); border: 0; }}
    </style>
  </head>
  <body>
    <header>
      <span>{title}</span>
      <a href="{pdf_href}" download>Download PDF</a>
    </header>
    <object data="{pdf_href}" type="application/pdf">
      <p>This browser cannot display PDFs inline. <a href="{pdf_href}">Open the PDF</a>.</p>
    </object>
  </body>
</html>
"""


def render_redirect_page(target: str) -> str:
    """HTML stub that sends the visitor to ``target``."""
    return REDIRECT_TEMPLATE.format(
        target_attr=html.escape(target, quote=True),
        target_text=html.escape(target),
        # "</" cannot close the script element once escaped
        target_js=json.dumps(target).replace("</", "<\\/")
    )


def render_pdf_viewer(title: str, pdf_name: str) -> str:
    """HTML page embedding the PDF stored next to it as ``pdf_name``."""
    return PDF_VIEWER_TEMPLATE.format(
        title=html.escape(title),
        pdf_href=html.escape(pdf_name, quote=True)
    )
