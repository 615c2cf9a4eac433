from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from newsvendor_prep.config import config
from newsvendor_prep.exceptions import DatabaseError

class Database:
    """Database connection manager for materialized derived tables."""
    
    _instance = None
    
    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Database, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance
    
    def __init__(self):
        """Initialize the database connection if not already initialized."""
        if self._initialized:
            return
        
        self._engine = None
        self._session_factory = None
        self._session = None
        self._initialized = True
    
    def initialize(self, connection_string=None):
        """Initialize database connection.
        
        Args:
            connection_string: Optional database connection string.
                              If not provided, will use configuration.
        """
        db_config = config.database_config
        if connection_string is None:
            connection_string = db_config['url']
        
        if not connection_string:
            raise DatabaseError("No database URL configured", code='NO_DATABASE_URL')
        
        if self._session is not None:
            self._session.remove()
        if self._engine is not None:
            self._engine.dispose()
        
        self._engine = create_engine(connection_string, echo=db_config['echo'])
        self._session_factory = sessionmaker(bind=self._engine)
        self._session = scoped_session(self._session_factory)
    
    def create_all_tables(self):
        """Create all tables defined in the models."""
        from newsvendor_prep.models import Base
        Base.metadata.create_all(self.engine)
    
    def session(self):
        """Get the current database session."""
        if self._session is None:
            self.initialize()
        return self._session
    
    @property
    def engine(self):
        """Get the database engine."""
        if self._engine is None:
            self.initialize()
        return self._engine
    
    @contextmanager
    def session_scope(self):
        """Provide a transactional scope around a series of operations."""
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
    
# Global database instance
db = Database()

@contextmanager
def session_scope():
    """Session scope context manager."""
    with db.session_scope() as session:
        yield session
