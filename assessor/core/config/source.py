import functools
import getpass
import os
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from ansible.parsing.vault import VaultLib, VaultSecret
from pydantic_settings import PydanticBaseSettingsSource
from pydantic_settings import SettingsError

import assessor.lib.util as util
from assessor.model import DeploymentEnvironment

VAULT_PASSWORD_ENV = "ASSESSOR_VAULT_PASSWORD"


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]


class SettingsCurrentState(CurrentState, total=False):
    override: t.Required[tuple[str, ...]]


def env_path(root: p.AnyUrl, env: DeploymentEnvironment) -> Path:
    """Directory holding environment-specific files; the local environment uses the root itself"""
    if root.scheme != "file" or root.path is None:
        raise SettingsError(f"{root} is not a legible location of YAML files")
    rootp = Path(root.path)
    if env is DeploymentEnvironment.Local:
        return rootp
    return rootp / "env.d" / env.value


def parse_overrides(override: t.Iterable[str]) -> dict[str, t.Any]:
    """`a.b.c=value` pairs into a nested dict, values parsed as YAML"""
    od: dict[str, t.Any] = {}
    for o in override:
        if "=" not in o:
            raise ValueError(f"malformed override {o!r}")
        k, v = [s.strip() for s in o.split("=", 1)]

        target = od
        path = k.split(".")
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = yaml.safe_load(v)
    return od


class SettingsSource(PydanticBaseSettingsSource):
    skip_keys: t.ClassVar[frozenset[str]] = frozenset({"env", "root", "override"})

    def __call__(self) -> dict[str, t.Any]:
        # init kwargs are expected to carry the config root and env
        data: dict[str, t.Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            try:
                field_value, field_key, value_is_complex = self.get_field_value(field, field_name)
                field_value = self.prepare_field_value(field_name, field, field_value, value_is_complex)
            except KeyError:
                continue
            except ValueError as e:
                raise SettingsError(f"error parsing value for field {field_name!r} from source {self!r}") from e

            data[field_key] = field_value
        return data

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        return parse_overrides(current_state.get("override", ()))


class YAMLCascadingSettingsSource(SettingsSource):
    """
    Reads `<field>.yaml` from the config root and then from
    `env.d/<env>/`; the most specific file wins, and command-line
    overrides are applied on top of it
    """

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        root = current_state["root"]
        env = current_state["env"]
        paths = [env_path(root, DeploymentEnvironment.Local)]
        if env is not DeploymentEnvironment.Local:
            paths.append(env_path(root, env))
        return paths

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in self.skip_keys:
            raise KeyError(field_name)
        yamls: list[str] = []
        for path in self.load_paths:
            fn = path / f"{field_name}.yaml"
            if fn.exists():
                yamls.append(fn.read_text(encoding="utf8"))
        if not yamls:
            raise KeyError(field_name)
        return yamls, field_name, True

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        if not value_is_complex:
            return super().prepare_field_value(field_name, field, value, value_is_complex)

        # complex values arrive as the list of YAML documents found along load_paths
        if not isinstance(value, list):
            raise ValueError(field_name)
        yamls = t.cast(list[str], value)
        data = yaml.safe_load(yamls[-1])
        if field_name not in self.parsed_options:
            return data
        ov = self.parsed_options[field_name]
        if isinstance(data, dict) and isinstance(ov, dict):
            return util.deep_update(t.cast(dict[t.Any, t.Any], data), t.cast(dict[t.Any, t.Any], ov))
        return ov


class OverrideSettingsSource(SettingsSource):
    """Supplies overrides for fields that have no YAML file of their own"""

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in self.skip_keys or field_name not in self.parsed_options:
            raise KeyError(field_name)
        return self.parsed_options[field_name], field_name, isinstance(self.parsed_options[field_name], dict)


class AnsibleVaultSecretsSource(SettingsSource):
    """
    Reads `secrets.vault.yaml` from the environment's config directory,
    decrypted with the password from $ASSESSOR_VAULT_PASSWORD or a prompt
    """

    filename: t.ClassVar[str] = "secrets.vault.yaml"

    @functools.cached_property
    def load_path(self) -> Path:
        current_state = t.cast(CurrentState, self.current_state)
        return env_path(current_state["root"], current_state["env"])

    @functools.cached_property
    def secrets(self) -> dict[str, t.Any]:
        current_state = t.cast(CurrentState, self.current_state)
        vp = self.load_path / self.filename

        # no vault file, no password prompt
        if not vp.exists():
            return {}

        key = os.environ.get(VAULT_PASSWORD_ENV)
        if not key:
            key = getpass.getpass(f"provide vault key ({current_state['env'].value}:{self.filename}): ")

        # None is the vault-id; a vault ID must be given here once one is used
        vault = VaultLib(secrets=[(None, VaultSecret(key.encode()))])
        content = vault.decrypt(vp.read_bytes())
        return yaml.safe_load(content) or {}

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        # skip_keys is checked first: self.secrets needs root to compute load_path
        if field_name in self.skip_keys or field_name not in self.secrets:
            raise KeyError(field_name)
        val = self.secrets[field_name]
        return val, field_name, isinstance(val, dict)
