"""Waiting for a fresh forge, running its initial setup and connecting to it.

Both retry loops use fixed attempt counts. The reachability poll sleeps
between attempts through the injected Time; the connection loop does not
sleep at all.
"""

import logging
from urllib.parse import parse_qsl

from stew.core.errors import ForgeApiError, ForgeUnavailableError, StewError
from stew.core.forge.abc import Forge
from stew.core.manifest import Admin
from stew.core.time.abc import Time

READINESS_RETRIES = 20
READINESS_INTERVAL = 1.0
CONNECT_ATTEMPTS = 20

# Install form of a brand-new Gitea container, as its web installer posts it.
GITEA_SETUP_FORM = (
    "db_type=sqlite3&db_host=localhost%3A3306&db_user=root&db_passwd=&db_name=gitea"
    "&ssl_mode=disable&db_schema=&charset=utf8&db_path=%2Fdata%2Fgitea%2Fgitea.db"
    "&app_name=Gitea%3A+Git+with+a+cup+of+tea&repo_root_path=%2Fdata%2Fgit%2Frepositories"
    "&lfs_root_path=%2Fdata%2Fgit%2Flfs&run_user=git&domain=localhost&ssh_port=22"
    "&http_port=3000&app_url=http%3A%2F%2Flocalhost%3A3000%2F"
    "&log_root_path=%2Fdata%2Fgitea%2Flog&smtp_addr=&smtp_port=&smtp_from=&smtp_user="
    "&smtp_passwd=&enable_federated_avatar=on&enable_open_id_sign_in=on"
    "&enable_open_id_sign_up=on&default_allow_create_organization=on"
    "&default_enable_timetracking=on&no_reply_address=noreply.localhost"
    "&password_algorithm=pbkdf2&admin_email="
)


def setup_form(admin: Admin) -> dict[str, str]:
    """Initial setup form fields with the admin account filled in."""
    form = dict(parse_qsl(GITEA_SETUP_FORM, keep_blank_values=True))
    form["admin_name"] = admin.username
    form["admin_passwd"] = admin.password
    form["admin_confirm_passwd"] = admin.password
    form["admin_email"] = admin.email
    return form


def wait_until_reachable(
    forge: Forge,
    time: Time,
    logger: logging.Logger,
    *,
    retries: int = READINESS_RETRIES,
    interval: float = READINESS_INTERVAL,
) -> None:
    """Poll the forge until it accepts connections.

    Probes once, then retries up to ``retries`` times with ``interval``
    seconds between attempts.

    Raises:
        ForgeUnavailableError: On the failure following the last retry
    """
    attempt = 0
    while True:
        try:
            forge.probe()
        except ForgeUnavailableError as e:
            if attempt < retries:
                attempt += 1
                logger.debug("Forge not reachable yet (attempt %d): %s", attempt, e)
                time.sleep(interval)
                continue
            raise ForgeUnavailableError(f"cannot connect to gitea: {e}") from e
        return


def submit_initial_setup(forge: Forge, admin: Admin, logger: logging.Logger) -> None:
    """Run the forge's one-time installer with the manifest's admin account.

    Must only be used against a forge that has never been set up.
    """
    logger.info("Submitting initial setup admin=%s", admin.username)
    forge.submit_setup_form(setup_form(admin))


def connect(forge: Forge, logger: logging.Logger, *, attempts: int = CONNECT_ATTEMPTS) -> str:
    """Authenticate against the forge API, retrying connection failures.

    Connection failures and 5xx answers are retried. Rejected credentials and
    other API errors propagate from the first attempt that sees them.

    Returns:
        The forge version

    Raises:
        ForgeAuthError: If the credentials are rejected
        ForgeApiError: If the forge answers with a non-5xx error status
        ForgeUnavailableError: If every attempt failed
    """
    last_error: StewError | None = None
    for attempt in range(1, attempts + 1):
        try:
            version = forge.authenticate()
        except ForgeApiError as e:
            if e.status_code < 500:
                raise
            last_error = e
            logger.debug("Connection attempt %d/%d got server error: %s", attempt, attempts, e)
            continue
        except ForgeUnavailableError as e:
            last_error = e
            logger.debug("Connection attempt %d/%d failed: %s", attempt, attempts, e)
            continue
        logger.info("Connected to gitea version=%s", version)
        return version
    raise ForgeUnavailableError(f"couldn't connect to gitea: {last_error}")


def prepare_forge(forge: Forge, admin: Admin, time: Time, logger: logging.Logger) -> str:
    """Wait for a fresh forge, set it up and connect to it."""
    wait_until_reachable(forge, time, logger)
    submit_initial_setup(forge, admin, logger)
    return connect(forge, logger)
