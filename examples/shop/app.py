"""Shop — a small versioned REST API.

Three live versions of the users resource, an orders resource that only
changed once, a disabled preview version and an unversioned health check.
Shows how requests for versions an endpoint never implemented fall back
to the closest older one.

Run:
    cd examples/shop && python app.py
"""

import logging

from versa import Api, ResolverConfig, VersionCheck

config = ResolverConfig.from_properties({
    "rest.api.version.management.apiContext": "api",
    "rest.api.version.management.versionContext": "v",
    "rest.api.version.management.min.version.support": "1.0",
    "rest.api.version.management.fallback.retryWithBaseLookupPath": "true",
})

api = Api(config, check=VersionCheck(scan_packages=("shop",), stop_on_fail=True))

_USERS = {1: "ada", 2: "grace"}


# ---------------------------------------------------------------------------
# Users: 1.0, 2.0, 3.0 and a disabled 4.0 preview
# ---------------------------------------------------------------------------

users_v1 = api.group("shop.users.UsersV1", version="1.0")
users_v2 = api.group("shop.users.UsersV2", version="2.0")
users_v3 = api.group("shop.users.UsersV3", version="3.0")
users_v4 = api.group("shop.users.UsersV4", version="4.0", disabled=True)


@users_v1.route("/users")
def list_users_v1():
    return sorted(_USERS.values())


@users_v2.route("/users")
def list_users_v2():
    return [{"id": k, "name": v} for k, v in sorted(_USERS.items())]


@users_v3.route("/users")
def list_users_v3():
    return {"users": list_users_v2(), "count": len(_USERS)}


@users_v3.route("/users/{id:int}")
def get_user_v3(id):
    return {"id": int(id), "name": _USERS.get(int(id))}


@users_v4.route("/users")
def list_users_v4():
    return {"users": list_users_v2(), "preview": True}


# ---------------------------------------------------------------------------
# Orders: one version only
# ---------------------------------------------------------------------------

orders_v1 = api.group("shop.orders.OrdersV1", version="1.0")


@orders_v1.route("/orders", methods=["GET", "POST"])
def orders_v1_handler():
    return []


# ---------------------------------------------------------------------------
# Unversioned
# ---------------------------------------------------------------------------


@api.group("shop.health", skip_versioning=True).route("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    for path in (
        "/api/v3.0/users",
        "/api/v2.5/users",
        "/api/v9/users",
        "/api/v3.0/orders",
        "/api/v4.0/users",
        "/api/v0.5/users",
        "/api/v2.0/health",
    ):
        resolution = api.lookup(path)
        target = resolution.path if resolution else "404"
        print(f"{path:<22} -> {target}")
