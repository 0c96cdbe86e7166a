"""002: create card_info table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE card_info (
            id              BIGINT          GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
            user_id         BIGINT          NOT NULL,
            number          VARCHAR(16)     NOT NULL,
            holder          VARCHAR(100)    NOT NULL,
            expiration_date VARCHAR(5)      NOT NULL,
            CONSTRAINT uq_card_info_number      UNIQUE (number),
            CONSTRAINT fk_card_info_user        FOREIGN KEY (user_id)
                REFERENCES users (id) ON DELETE CASCADE,
            CONSTRAINT ck_card_info_number      CHECK (number ~ '^[0-9]{16}$'),
            CONSTRAINT ck_card_info_expiration  CHECK (expiration_date ~ '^(0[1-9]|1[0-2])/[0-9]{2}$')
        );
    """)
    op.execute("CREATE INDEX idx_card_info_user_id ON card_info (user_id);")
    op.execute("COMMENT ON TABLE card_info IS 'Payment cards; owned through users.credentials_id';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS card_info CASCADE;")
