"""Names shared with the operator, the OIDC server and the ingress controller."""

# Request annotations (consumed and removed from the Ingress)
APP_NAME_ANNOTATION = "verify.ibm.com/app.name"
APP_URL_ANNOTATION = "verify.ibm.com/app.url"
CR_NAME_ANNOTATION = "verify.ibm.com/cr.name"
CONSENT_ACTION_ANNOTATION = "verify.ibm.com/consent.action"

TRANSIENT_ANNOTATIONS = (
    APP_NAME_ANNOTATION,
    APP_URL_ANNOTATION,
    CR_NAME_ANNOTATION,
    CONSENT_ACTION_ANNOTATION,
)

# Output annotations
INGRESS_CLASS_ANNOTATION = "kubernetes.io/ingress.class"
LOCATION_SNIPPETS_ANNOTATION = "nginx.org/location-snippets"
SERVER_SNIPPETS_ANNOTATION = "nginx.org/server-snippets"

# Credential records
PRODUCT_LABEL_KEY = "product"
PRODUCT_LABEL_VALUE = "ibm-security-verify"
SECRET_NAME_PREFIX = "ibm-security-verify-client-"

CLIENT_NAME_KEY = "client_name"
CLIENT_ID_KEY = "client_id"
CLIENT_SECRET_KEY = "client_secret"
DISCOVERY_ENDPOINT_KEY = "discovery_endpoint"

# Tenant configuration custom resource
TENANT_CONFIG_GROUP = "ibm.com"
TENANT_CONFIG_VERSION = "v1"
TENANT_CONFIG_PLURAL = "ibmsecurityverifies"

# Paths and headers understood by the OIDC server
OIDC_AUTH_URI = "/verify-oidc-auth"
AUTH_URI = "/auth"
LOGIN_URI = "/login"
URL_ARG = "url"
NAMESPACE_HEADER = "X-Verify-Namespace"
VERIFY_SECRET_HEADER = "X-Verify-Secret"
URL_ROOT_HEADER = "X-Verify-Url-Root"
