import databases
import sqlalchemy
from sqlalchemy.schema import CreateIndex, CreateTable

metadata = sqlalchemy.MetaData()

# Timestamps are integer microseconds since the epoch, see utils.datetime.
messages = sqlalchemy.Table(
    "messages",
    metadata,
    # Insertion order, breaks ties between equal created_at values.
    sqlalchemy.Column("seq", sqlalchemy.Integer, primary_key=True, autoincrement=True),
    sqlalchemy.Column("id", sqlalchemy.String(32), nullable=False, unique=True),
    sqlalchemy.Column("sender", sqlalchemy.String(255), nullable=False, index=True),
    sqlalchemy.Column("receiver", sqlalchemy.String(255), nullable=False, index=True),
    sqlalchemy.Column("type", sqlalchemy.String(16), nullable=False),
    sqlalchemy.Column("message", sqlalchemy.Text, nullable=False),
    sqlalchemy.Column("reply_id", sqlalchemy.String(32), nullable=True),
    sqlalchemy.Column("reply_sender", sqlalchemy.String(255), nullable=True),
    sqlalchemy.Column("reply_snippet", sqlalchemy.Text, nullable=True),
    sqlalchemy.Column("status", sqlalchemy.String(16), nullable=False),
    sqlalchemy.Column("read_at", sqlalchemy.BigInteger, nullable=True),
    sqlalchemy.Column("created_at", sqlalchemy.BigInteger, nullable=False, index=True),
)

users = sqlalchemy.Table(
    "users",
    metadata,
    sqlalchemy.Column("username", sqlalchemy.String(255), primary_key=True),
    sqlalchemy.Column("password_hash", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("profile_picture", sqlalchemy.Text, nullable=False),
    sqlalchemy.Column("last_seen", sqlalchemy.BigInteger, nullable=True),
    sqlalchemy.Column("created_at", sqlalchemy.BigInteger, nullable=False),
)


async def create_tables(database: databases.Database) -> None:
    for table in metadata.sorted_tables:
        await database.execute(CreateTable(table, if_not_exists=True))
        for index in table.indexes:
            await database.execute(CreateIndex(index, if_not_exists=True))


def like_pattern(substring: str) -> str:
    """A LIKE pattern matching substring literally, for use with escape="/"."""
    escaped = substring.replace("/", "//").replace("%", "/%").replace("_", "/_")
    # Bound as a parameter, a literal % in the SQL text breaks the sqlite backend.
    return f"%{escaped}%"
