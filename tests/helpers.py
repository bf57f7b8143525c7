import io


def dxf_text(doc):
    """Serialize an ezdxf document to DXF text, as an upload would deliver it."""
    stream = io.StringIO()
    doc.write(stream)
    return stream.getvalue()


def svg_text(body, namespaced=True):
    xmlns = ' xmlns="http://www.w3.org/2000/svg"' if namespaced else ''
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<svg{xmlns} width="500" height="500">{body}</svg>'
