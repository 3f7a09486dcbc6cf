import os
from typing import Optional
from dotenv import load_dotenv
from distributor.errors import MissingEnvironmentVariableException

load_dotenv()


def env_var(accessor: str, default: Optional[str] = None) -> str:
    """
    Attempt to fetch an environment variable and throw
    an error if not found and no default was given
    """
    var = os.environ.get(accessor)
    if not var:
        if default is None:
            raise MissingEnvironmentVariableException(accessor)
        return default
    return var


class ENV:
    """Names of the variables read by `conf_from_env`"""

    OPERATOR = "DISTRIBUTOR_OPERATOR"
    CUSTODY = "DISTRIBUTOR_CUSTODY"
    BITS_PER_WORD = "DISTRIBUTOR_BITS_PER_WORD"
    COMMIT_POLICY = "DISTRIBUTOR_COMMIT_POLICY"
    DB_PATH = "DISTRIBUTOR_DB_PATH"
