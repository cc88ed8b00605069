import os

from dotenv import dotenv_values


def read_dotenv(dotenv_path):
    """Parse a KEY=VALUE file into a dict. A missing file yields an empty dict."""
    if not dotenv_path or not os.path.isfile(dotenv_path):
        return {}
    values = dotenv_values(dotenv_path)
    # Bare keys without "=" come back as None.
    return {key: value for key, value in values.items() if value is not None}


def load_env(dotenv_path=None, environ=None):
    """File values overlaid by the process environment; the process wins."""
    if dotenv_path is None:
        dotenv_path = os.path.join(os.getcwd(), ".env")
    merged = read_dotenv(dotenv_path)
    merged.update(dict(os.environ if environ is None else environ))
    return merged


def first_non_empty(env, *names):
    for name in names:
        value = str(env.get(name, "") or "").strip()
        if value:
            return value
    return ""
