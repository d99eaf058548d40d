from catalog.client import ApiError

from .models import AuthResult, User


def _auth_result(body):
    body = body or {}
    token = body.get("token")
    user = body.get("user")
    if not token or not user:
        raise ApiError("The server did not return a session.", payload=body)
    return AuthResult(token=token, user=User.from_api(user))


def login(client, email, password):
    body = client.post("/auth/login", json={"email": email, "password": password})
    return _auth_result(body)


def register(client, payload):
    return _auth_result(client.post("/auth/register", json=payload))
