import duckdb
import logging
from pathlib import Path
from typing import Optional, Union

from ..exceptions import StorageConnectionError

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """Manages the lifecycle of a DuckDB database connection."""

    def __init__(self, db_path: Union[str, Path]):
        """
        Initialize the handler with a database path.

        Parameters:
            db_path (Union[str, Path]): Path to the DuckDB file, or ":memory:"
                (case-insensitive) for an in-memory database.
        """
        if isinstance(db_path, str) and db_path.lower() == ":memory:":
            self.db_path_resolved = Path(":memory:")
            logger.info("Using in-memory DuckDB database.")
        else:
            self.db_path_resolved = Path(db_path).expanduser().resolve()
            logger.info(
                f"ConnectionHandler initialized for DB at: {self.db_path_resolved}"  # noqa: E501
            )

        self._connection: Optional[duckdb.DuckDBPyConnection] = None

    @property
    def is_memory(self) -> bool:
        return str(self.db_path_resolved) == ":memory:"

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """
        Return the open connection, connecting first if needed.

        Creates the parent directory of a file-based database.

        Raises:
            StorageConnectionError: If DuckDB fails to connect.
        """
        if self._connection is None:
            try:
                if not self.is_memory:
                    self.db_path_resolved.parent.mkdir(
                        parents=True, exist_ok=True
                    )
                self._connection = duckdb.connect(
                    database=str(self.db_path_resolved)
                )
                logger.info("Successfully connected to the database.")
            except (duckdb.Error, OSError) as e:
                raise StorageConnectionError(
                    f"Failed to connect to database: {e}", original_exception=e
                ) from e
        return self._connection

    def close_connection(self) -> None:
        """Closes the connection if it exists and sets it to None, allowing
        for reconnection."""
        if self._connection:
            try:
                self._connection.close()
                logger.info(
                    f"Database connection to {self.db_path_resolved} closed."
                )
            except duckdb.Error as e:
                logger.error(f"Error closing the database connection: {e}")
            finally:
                self._connection = None

    def __enter__(self) -> duckdb.DuckDBPyConnection:
        return self.get_connection()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close_connection()
