import os
import secrets
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

REALM = "particle-dance"

basic_security = HTTPBasic(realm=REALM)


def _expected_credentials():
    # Defaults are for local play only; set API_USERNAME / API_PASSWORD when exposed.
    return os.environ.get("API_USERNAME", "admin"), os.environ.get("API_PASSWORD", "dance123")


def verify_basic_auth(credentials: HTTPBasicCredentials = Depends(basic_security)):
    username, password = _expected_credentials()
    correct_username = secrets.compare_digest(credentials.username.encode(), username.encode())
    correct_password = secrets.compare_digest(credentials.password.encode(), password.encode())
    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
        )
    return credentials.username
