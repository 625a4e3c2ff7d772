"""
NGINX server snippet that sends every request through the OIDC server.

The literal text must stay byte-for-byte stable; the ingress controller
and the OIDC server both depend on it.
"""

from dataclasses import asdict, dataclass

from ...constants import (
    AUTH_URI,
    LOGIN_URI,
    NAMESPACE_HEADER,
    OIDC_AUTH_URI,
    URL_ARG,
    URL_ROOT_HEADER,
    VERIFY_SECRET_HEADER,
)

SERVER_SNIPPET_TEMPLATE = """location = {check_path} {{
  proxy_pass {oidc_root}{auth_path};
  proxy_pass_request_body off;

  proxy_set_header Content-Length "";
  proxy_set_header {namespace_header} {namespace};
  proxy_set_header {secret_header} {secret_name};
  proxy_set_header {url_root_header} {ingress_root}{check_path};
}}

error_page 401 = @error401;

# If the user is not logged in, redirect them to the login URL
location @error401 {{
  proxy_pass {oidc_root}{login_path}?{url_arg}=$scheme://$http_host$request_uri;

  proxy_set_header {namespace_header} {namespace};
  proxy_set_header {secret_header} {secret_name};
  proxy_set_header {url_root_header} {ingress_root}{check_path};
}}
"""


@dataclass(frozen=True)
class ServerSnippet:
    """Values substituted into the server snippet."""

    oidc_root: str
    namespace: str
    secret_name: str
    ingress_root: str
    check_path: str = OIDC_AUTH_URI
    auth_path: str = AUTH_URI
    login_path: str = LOGIN_URI
    url_arg: str = URL_ARG
    namespace_header: str = NAMESPACE_HEADER
    secret_header: str = VERIFY_SECRET_HEADER
    url_root_header: str = URL_ROOT_HEADER

    def render(self) -> str:
        return SERVER_SNIPPET_TEMPLATE.format(**asdict(self))


def location_snippet(check_path: str = OIDC_AUTH_URI) -> str:
    """Location snippet that triggers the auth sub-request."""
    return f"auth_request {check_path};"
