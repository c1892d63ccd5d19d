"""initial schema: users, catalog, progress, rewards

Revision ID: 20261001120000
Revises:
Create Date: 2026-10-01 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261001120000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create every table of the service."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('level', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    # Content catalog
    op.create_table(
        'level_words',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('level_number', sa.Integer(), nullable=False),
        sa.Column('word_key', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('level_number', 'word_key', name='uq_level_word'),
    )
    op.create_index('ix_level_words_id', 'level_words', ['id'])
    op.create_index('ix_level_words_level_number', 'level_words', ['level_number'])
    op.create_index('ix_level_words_word_key', 'level_words', ['word_key'])

    op.create_table(
        'translations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('word_key', sa.String(length=100), nullable=False),
        sa.Column('language_code', sa.String(length=2), nullable=False),
        sa.Column('text', sa.String(length=255), nullable=False),
        sa.Column('gif_url', sa.String(length=500), nullable=True),
        sa.Column('audio_url', sa.String(length=500), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('word_key', 'language_code', name='uq_translation_word_language'),
    )
    op.create_index('ix_translations_id', 'translations', ['id'])
    op.create_index('ix_translations_word_key', 'translations', ['word_key'])

    op.create_table(
        'quiz_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('level_number', sa.Integer(), nullable=False),
        sa.Column('question_type', sa.String(length=30), nullable=False, server_default='multiple_choice'),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.String(length=255), nullable=False),
        sa.Column('options_json', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('gif_url', sa.String(length=500), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False, server_default='20'),
        sa.Column('required_score', sa.Integer(), nullable=False, server_default='70'),
        sa.Column('time_limit', sa.Integer(), nullable=True, server_default='30'),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_quiz_questions_id', 'quiz_questions', ['id'])
    op.create_index('ix_quiz_questions_level_number', 'quiz_questions', ['level_number'])

    # Per-level progress and its word sets
    op.create_table(
        'user_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('level_number', sa.Integer(), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('quiz_passed', sa.Boolean(), nullable=True),
        sa.Column('quiz_score', sa.Integer(), nullable=True),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('best_score', sa.Integer(), nullable=True),
        sa.Column('unlocked_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('last_attempt', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'level_number', name='uq_user_level_progress'),
    )
    op.create_index('ix_user_progress_id', 'user_progress', ['id'])
    op.create_index('ix_user_progress_user_id', 'user_progress', ['user_id'])

    op.create_table(
        'progress_completed_words',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('progress_id', sa.Integer(), nullable=False),
        sa.Column('word_key', sa.String(length=100), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['progress_id'], ['user_progress.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('progress_id', 'word_key', name='uq_completed_word'),
    )
    op.create_index('ix_progress_completed_words_progress_id', 'progress_completed_words', ['progress_id'])

    op.create_table(
        'progress_mastered_words',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('progress_id', sa.Integer(), nullable=False),
        sa.Column('word_key', sa.String(length=100), nullable=False),
        sa.Column('mastered_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['progress_id'], ['user_progress.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('progress_id', 'word_key', name='uq_mastered_word'),
    )
    op.create_index('ix_progress_mastered_words_progress_id', 'progress_mastered_words', ['progress_id'])

    # Rewards
    op.create_table(
        'reward_ledgers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('total_xp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('coins', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('streak_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('last_daily_reward', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reward_ledgers_id', 'reward_ledgers', ['id'])
    op.create_index('ix_reward_ledgers_user_id', 'reward_ledgers', ['user_id'], unique=True)

    op.create_table(
        'user_badges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('earned_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'key', name='uq_user_badge'),
    )
    op.create_index('ix_user_badges_id', 'user_badges', ['id'])
    op.create_index('ix_user_badges_user_id', 'user_badges', ['user_id'])


def downgrade() -> None:
    """Drop every table, children first."""
    op.drop_table('user_badges')
    op.drop_table('reward_ledgers')
    op.drop_table('progress_mastered_words')
    op.drop_table('progress_completed_words')
    op.drop_table('user_progress')
    op.drop_table('quiz_questions')
    op.drop_table('translations')
    op.drop_table('level_words')
    op.drop_table('users')
