import requests


ERROR_BODY_LIMIT = 800


class SupabaseHttpError(RuntimeError):
    """Non-2xx response from the Supabase REST or auth API."""

    def __init__(self, status_code, status_text, body):
        self.status_code = status_code
        self.status_text = status_text or ""
        self.body = (body or "")[:ERROR_BODY_LIMIT]
        super().__init__(f"HTTP {self.status_code} {self.status_text}\n{self.body}")

    @classmethod
    def from_response(cls, resp):
        return cls(resp.status_code, resp.reason, resp.text)


def _parse_json(resp):
    if not resp.text:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


class SupabaseRestClient:
    """PostgREST accessor for `<base>/rest/v1`."""

    def __init__(self, supabase_url, api_key, bearer_token=None, timeout_seconds=None):
        self.supabase_url = str(supabase_url or "").rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {bearer_token or api_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method, path, params=None, json_body=None, headers=None):
        req_headers = dict(self.headers)
        if headers:
            req_headers.update(headers)
        url = f"{self.supabase_url}{path}"
        resp = requests.request(
            method=method,
            url=url,
            headers=req_headers,
            params=params,
            json=json_body,
            timeout=self.timeout_seconds,
        )
        if resp.status_code < 200 or resp.status_code >= 300:
            raise SupabaseHttpError.from_response(resp)
        return _parse_json(resp)

    def fetch_path(self, resource_path, params=None):
        data = self._request("GET", "/" + str(resource_path).lstrip("/"), params=dict(params or {}))
        if not isinstance(data, list):
            return []
        return data

    def fetch_all(self, table, params=None):
        return self.fetch_path(f"/rest/v1/{table}", params)

    def insert(self, table, rows):
        data = self._request(
            "POST",
            f"/rest/v1/{table}",
            json_body=list(rows),
            headers={"Prefer": "return=representation"},
        )
        return data if isinstance(data, list) else []

    def upsert(self, table, rows, on_conflict):
        data = self._request(
            "POST",
            f"/rest/v1/{table}",
            params={"on_conflict": on_conflict},
            json_body=list(rows),
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        return data if isinstance(data, list) else []

    def update(self, table, filters, values):
        """PATCH the rows matching PostgREST filters such as {"id": "eq.<id>"}."""
        data = self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=dict(filters),
            json_body=values,
            headers={"Prefer": "return=minimal"},
        )
        return data if isinstance(data, list) else []

    def rpc(self, function_name, body=None):
        return self._request("POST", f"/rest/v1/rpc/{function_name}", json_body=body or {})


def fetch_all(base_url, key, resource_path, query_params=None):
    """GET one bounded page of rows; the caller chooses the `limit` cap."""
    return SupabaseRestClient(base_url, key).fetch_path(resource_path, query_params)
