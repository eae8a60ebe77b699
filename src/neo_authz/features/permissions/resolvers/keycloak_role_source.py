"""Keycloak admin client that reads a user's realm roles."""

import logging
from typing import Dict, List, Optional

import httpx
from keycloak import KeycloakAdmin, KeycloakOpenIDConnection
from keycloak.exceptions import KeycloakError, KeycloakGetError

from ....config.settings import KeycloakSettings, get_keycloak_settings
from ....core.exceptions import ConfigurationError, KeycloakConnectionError
from .role_mapping import mask_user_id

logger = logging.getLogger(__name__)


class KeycloakRoleSource:
    """Look users up in a realm and return their realm role names.

    Authenticates with the client credentials grant. The user is looked up by
    id first and by exact username second; an unknown user has no roles.
    """

    def __init__(self, settings: Optional[KeycloakSettings] = None, admin: Optional[KeycloakAdmin] = None):
        self._settings = settings or get_keycloak_settings()
        self._admin = admin

    def _get_admin(self) -> KeycloakAdmin:
        if self._admin is None:
            secret = self._settings.admin_client_secret.get_secret_value()
            if not secret:
                raise ConfigurationError("Keycloak admin client secret is not configured")
            connection = KeycloakOpenIDConnection(
                server_url=self._settings.base_url.rstrip("/"),
                realm_name=self._settings.realm,
                client_id=self._settings.admin_client_id,
                client_secret_key=secret,
                verify=self._settings.verify_ssl,
                timeout=self._settings.timeout,
            )
            self._admin = KeycloakAdmin(connection=connection)
            logger.info(f"Created Keycloak admin client for realm: {self._settings.realm}")
        return self._admin

    async def get_user_roles(self, user_id: str) -> List[str]:
        masked = mask_user_id(user_id)
        try:
            admin = self._get_admin()
            user = await self._find_user(admin, user_id)
            if user is None:
                logger.warning(f"User {masked} not found in Keycloak")
                return []

            roles = await admin.a_get_realm_roles_of_user(user_id=user["id"])
        except (KeycloakError, httpx.HTTPError) as e:
            logger.error(f"Error retrieving roles from Keycloak for user {masked}: {type(e).__name__}")
            raise KeycloakConnectionError(
                f"Failed to retrieve user roles from Keycloak for user {masked}"
            ) from e

        names = [role["name"] for role in roles or [] if role.get("name")]
        logger.debug(f"Retrieved {len(names)} roles from Keycloak for user {masked}")
        return names

    async def _find_user(self, admin: KeycloakAdmin, user_id: str) -> Optional[Dict]:
        try:
            user = await admin.a_get_user(user_id)
            if user:
                return user
        except KeycloakGetError as e:
            if e.response_code != 404:
                raise
            logger.debug(f"User {mask_user_id(user_id)} not found by id, trying username search")

        users = await admin.a_get_users({"username": user_id, "exact": True})
        return users[0] if users else None
