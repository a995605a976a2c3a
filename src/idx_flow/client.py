# client.py
# AuthClient wires configuration to the two collaborators the engine needs:
# a transport and a transaction storage. Config and wiring only.

from idx_flow.config import IdxConfig, get_oauth_domain
from idx_flow.transport import HttpTransport
from idx_flow.storage import FileStorage, MemoryStorage, TransactionStorage


class AuthClient:
    """
    Handle passed to `introspect` and `authenticate`.

    Example:
        client = AuthClient(IdxConfig.from_env())
        transaction = authenticate(client, username="ada", password="...")
    """

    def __init__(
        self,
        config: IdxConfig,
        transport: HttpTransport | None = None,
        storage: TransactionStorage | None = None,
    ) -> None:
        self.config = config
        self.transport = transport or HttpTransport(timeout=config.http_timeout)
        if storage is None:
            storage = FileStorage(config.transaction_file) if config.transaction_file else MemoryStorage()
        self.storage = storage

    @property
    def domain(self) -> str:
        return get_oauth_domain(self.config.issuer)
