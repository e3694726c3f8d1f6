"""
Statement execution and lifetime management.

A QueryExecutor wraps a SQLAlchemy bind and hands out Query objects, one
per statement. A Query owns the connection it runs on until it is closed:

    with executor.query(statement) as q:
        q.request_generated_key()
        q.execute_update()
        new_id = q.generated_key

or, for one-shot statements:

    executor.query(statement).auto_close().execute_update()

When the bind is an Engine, each query checks out its own connection,
commits after a successful execution, rolls back on failure and returns
the connection on close. When the bind is a Connection, the caller owns the
transaction and the query neither commits nor closes it.
"""

import logging
from typing import Any, Callable, List, Optional, Type, Union

from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.sql.expression import Executable

from entity_dao.exceptions import QueryError
from entity_dao.models import EntityRegistry

logger = logging.getLogger(__name__)

class Query:
    """
    A single statement bound to a connection.

    Attributes:
        statement (Executable): The statement to run
    """

    def __init__(self, executor: "QueryExecutor", statement: Executable):
        self._executor = executor
        self.statement = statement
        self._connection: Optional[Connection] = None
        self._owns_connection = False
        self._auto_close = False
        self._closed = False
        self._generated_key_requested = False
        self._generated_key: Any = None

    def __enter__(self) -> "Query":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def auto_close(self) -> "Query":
        """Release the query right after its next execution, whether it succeeds or not."""
        self._auto_close = True
        return self

    def request_generated_key(self) -> "Query":
        """Capture the database-generated primary key of the next INSERT."""
        self._check_open()
        self._generated_key_requested = True
        return self

    @property
    def generated_key(self) -> int:
        """
        The primary key generated by the executed INSERT.

        Raises:
            QueryError: If the key was not requested before execution or the
                database did not return one
        """
        if not self._generated_key_requested:
            raise QueryError("Generated key was not requested before execution")
        if self._generated_key is None:
            raise QueryError("No generated key available")
        return int(self._generated_key)

    def execute_update(self) -> int:
        """Execute an INSERT, UPDATE or DELETE and return the number of affected rows."""
        return self._run(self._handle_update)

    def execute_count(self) -> int:
        """Execute a scalar count query."""
        return self._run(lambda result: int(result.scalar_one()))

    def find(self, entity_type: Type) -> Optional[Any]:
        """Execute and map the first row to entity_type, or return None if there are no rows."""
        descriptor = self._executor.registry.lookup(entity_type)

        def handler(result: CursorResult):
            row = result.mappings().first()
            return descriptor.from_row(row) if row is not None else None

        return self._run(handler)

    def list(self, entity_type: Type) -> List[Any]:
        """Execute and map every row to entity_type."""
        descriptor = self._executor.registry.lookup(entity_type)
        return self._run(lambda result: [descriptor.from_row(row) for row in result.mappings().all()])

    def close(self) -> None:
        """Release the connection. Closing twice is allowed."""
        if self._closed:
            return
        self._closed = True
        if self._owns_connection and self._connection is not None:
            self._connection.close()
        self._connection = None

    def _check_open(self) -> None:
        if self._closed:
            raise QueryError("Query is closed")

    def _acquire(self) -> Connection:
        if self._connection is None:
            self._connection, self._owns_connection = self._executor.connect()
        return self._connection

    def _handle_update(self, result: CursorResult) -> int:
        if self._generated_key_requested:
            if not result.is_insert:
                raise QueryError("Generated keys are only available for INSERT statements")
            primary_key = result.inserted_primary_key
            self._generated_key = primary_key[0] if primary_key else None
        return result.rowcount

    def _run(self, handler: Callable[[CursorResult], Any]) -> Any:
        self._check_open()
        try:
            connection = self._acquire()
            result = connection.execute(self.statement)
            value = handler(result)
            if self._owns_connection:
                connection.commit()
            return value
        except Exception as e:
            logger.error(f"Error executing statement: {str(e)}")
            if self._owns_connection and self._connection is not None:
                self._connection.rollback()
            raise
        finally:
            if self._auto_close:
                self.close()


class QueryExecutor:
    """
    Creates Query objects for statements and maps their rows to entities.

    Attributes:
        bind (Union[Engine, Connection]): Where statements run
        registry (EntityRegistry): Registry used to map rows to entities
    """

    def __init__(self, bind: Union[Engine, Connection], registry: EntityRegistry):
        self.bind = bind
        self.registry = registry

    def query(self, statement: Executable) -> Query:
        return Query(self, statement)

    def connect(self):
        """
        Return a connection for a query and whether the query owns it.

        Returns:
            tuple: (Connection, owned)
        """
        if isinstance(self.bind, Connection):
            return self.bind, False
        return self.bind.connect(), True
