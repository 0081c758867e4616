import enum


class DeploymentEnvironment(enum.Enum):
    """Selects the `config/env.d/<value>` overlay and the secrets file"""

    Production = "production"
    Development = "development"
    Test = "test"
    Local = "local"
