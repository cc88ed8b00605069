from dataclasses import dataclass

from env_loader import first_non_empty, load_env


SUPABASE_URL_ALIASES = ("SUPABASE_URL", "VITE_SUPABASE_URL")
ANON_KEY_ALIASES = ("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY")
# Modern secret key name is accepted after the legacy service role key.
SERVICE_KEY_ALIASES = ("SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_SECRET_KEY")

DEFAULT_NOT_AUTHORIZED_ROUTE = "/not-authorized"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class AppSettings:
    supabase_url: str
    anon_key: str = ""
    service_role_key: str = ""
    not_authorized_route: str = DEFAULT_NOT_AUTHORIZED_ROUTE

    def api_key(self, prefer_service=True):
        if prefer_service:
            return self.service_role_key or self.anon_key
        return self.anon_key

    def require_url_and_key(self, key_kind="any"):
        """Return (url, key) for the requested key kind or raise ConfigError."""
        if key_kind == "service":
            key, key_names = self.service_role_key, SERVICE_KEY_ALIASES
        elif key_kind == "anon":
            key, key_names = self.anon_key, ANON_KEY_ALIASES
        else:
            key, key_names = self.api_key(), SERVICE_KEY_ALIASES + ANON_KEY_ALIASES

        missing = []
        if not self.supabase_url:
            missing.append(" or ".join(SUPABASE_URL_ALIASES))
        if not key:
            missing.append(" or ".join(key_names))
        if missing:
            raise ConfigError(
                "Missing Supabase configuration: "
                + "; ".join(missing)
                + ". Set them in .env or the process environment."
            )
        return self.supabase_url, key


def load_app_settings(dotenv_path=None, environ=None):
    env = load_env(dotenv_path=dotenv_path, environ=environ)
    return AppSettings(
        supabase_url=first_non_empty(env, *SUPABASE_URL_ALIASES).rstrip("/"),
        anon_key=first_non_empty(env, *ANON_KEY_ALIASES),
        service_role_key=first_non_empty(env, *SERVICE_KEY_ALIASES),
        not_authorized_route=(
            first_non_empty(env, "EACHR_NOT_AUTHORIZED_ROUTE") or DEFAULT_NOT_AUTHORIZED_ROUTE
        ),
    )
