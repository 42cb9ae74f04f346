"""Test doubles and TMDB payload builders."""

from app.core.errors import UpstreamHTTPError


class FakeTMDB:
    """Stands in for TMDBClient: canned payloads keyed by endpoint.

    A callable value is called with the request params first. A value (or
    result) that is an exception instance is raised instead of returned.
    Endpoints without a canned response answer with HTTP 404.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    async def fetch_resource(self, endpoint, params=None):
        self.calls.append((endpoint, dict(params or {})))
        result = self.responses.get(endpoint)
        if result is None:
            raise UpstreamHTTPError(404, endpoint)
        if callable(result):
            result = result(dict(params or {}))
        if isinstance(result, Exception):
            raise result
        return result

    def endpoints(self):
        return [endpoint for endpoint, _ in self.calls]


def movie(movie_id, title="Movie", **extra):
    record = {
        "id": movie_id,
        "title": title,
        "overview": f"About {title}",
        "poster_path": f"/p{movie_id}.jpg",
        "backdrop_path": f"/b{movie_id}.jpg",
        "release_date": "2023-05-17",
        "vote_average": 7.5,
        "vote_count": 120,
        "genre_ids": [28, 12],
    }
    record.update(extra)
    return record


def listing(results, page=1, total_pages=1):
    return {
        "page": page,
        "results": results,
        "total_pages": total_pages,
        "total_results": len(results),
    }
