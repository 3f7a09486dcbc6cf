import json
from pathlib import Path

from distributor.env import ENV, env_var
from distributor.models import Config


def load_conf(path: str) -> Config:
    """Loads an existing config from a JSON file"""
    return Config.model_validate_json(Path(path).read_text())


def conf_from_env() -> Config:
    """Builds the config from the `DISTRIBUTOR_*` environment variables listed in `ENV`"""
    return Config(
        operator=env_var(ENV.OPERATOR),
        custody=env_var(ENV.CUSTODY),
        bits_per_word=int(env_var(ENV.BITS_PER_WORD, "256")),
        commit_policy=env_var(ENV.COMMIT_POLICY, "per_run"),
        db_path=env_var(ENV.DB_PATH, "") or None,
    )


def write_conf(conf: Config, path: str) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w+") as j:
        j.write(json.dumps(conf.model_dump(mode="json"), indent=4))
