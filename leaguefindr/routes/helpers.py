from flask import request

from leaguefindr.errors import InvalidInput
from leaguefindr.services.notifications import parse_pagination


def json_body():
    """Decode the request body as a JSON object; empty bodies read as {}."""
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data(cache=True):
            raise InvalidInput('Invalid request body')
        return {}
    if not isinstance(data, dict):
        raise InvalidInput('Invalid request body')
    return data


def org_id_arg(body=None):
    org_id = request.args.get('org_id') or (body or {}).get('org_id') or ''
    return str(org_id).strip()


def pagination_args():
    return parse_pagination(request.args.get('limit'), request.args.get('offset'))


def paginated(key, rows, total, limit, offset):
    return {
        key: [row.to_dict() for row in rows],
        'count': total,
        'limit': limit,
        'offset': offset,
    }
