import json

from rest_framework import renderers


class FileRenderer(renderers.BaseRenderer):
    """
    Lets ?format=csv|xlsx pass content negotiation for views that answer
    with a ready-made HttpResponse. Error payloads are rendered as JSON.
    """
    charset = None
    render_style = 'binary'

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if isinstance(data, (bytes, str)):
            return data
        return json.dumps(data, default=str).encode('utf-8')


class CSVRenderer(FileRenderer):
    media_type = 'text/csv'
    format = 'csv'


class XLSXRenderer(FileRenderer):
    media_type = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    format = 'xlsx'
