"""Batch sentiment analysis tables.

The conversations and messages tables belong to the CRM and already exist;
this revision only adds the analysis summary and detail tables.

Revision ID: 00001
Revises:
Create Date: 2024-02-01

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '00001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # batch_sentiment_analysis
    op.create_table(
        'batch_sentiment_analysis',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('start_date', sa.String(40), nullable=False),
        sa.Column('end_date', sa.String(40), nullable=False),
        sa.Column('overall_sentiment', sa.Text(), nullable=True),
        sa.Column('positive_count', sa.Integer(), server_default='0'),
        sa.Column('negative_count', sa.Integer(), server_default='0'),
        sa.Column('neutral_count', sa.Integer(), server_default='0'),
        sa.Column('unknown_count', sa.Integer(), server_default='0'),
        sa.Column('conversation_ids', sa.Text(), server_default='[]'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.current_timestamp(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_batch_sentiment_analysis_created', 'batch_sentiment_analysis', ['created_at'])

    # batch_sentiment_analysis_details
    op.create_table(
        'batch_sentiment_analysis_details',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('batch_analysis_id', sa.String(36), nullable=False),
        sa.Column('conversation_id', sa.String(36), nullable=False),
        sa.Column('sentiment', sa.String(20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.current_timestamp(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['batch_analysis_id'], ['batch_sentiment_analysis.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.conversation_id']),
        sa.CheckConstraint(
            "sentiment IN ('good', 'moderate', 'bad', 'unknown')",
            name='ck_batch_sentiment_details_sentiment',
        ),
    )
    op.create_index('idx_batch_sentiment_details_batch', 'batch_sentiment_analysis_details', ['batch_analysis_id'])


def downgrade() -> None:
    op.drop_index('idx_batch_sentiment_details_batch', table_name='batch_sentiment_analysis_details')
    op.drop_table('batch_sentiment_analysis_details')
    op.drop_index('idx_batch_sentiment_analysis_created', table_name='batch_sentiment_analysis')
    op.drop_table('batch_sentiment_analysis')
