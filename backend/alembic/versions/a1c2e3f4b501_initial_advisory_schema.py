"""initial advisory schema: users, sessions, questions, answers, histories, counters

Revision ID: a1c2e3f4b501
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = 'a1c2e3f4b501'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLE = sa.Enum('penanya', 'penjawab', name='user_role')
QUESTION_STATUS = sa.Enum('belum_dijawab', 'dijawab', name='question_status')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', USER_ROLE, nullable=False, comment='作成後は変更不可'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('session_token', sa.String(64), nullable=False),
        sa.Column('csrf_token', sa.String(64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False, comment='固定期限 (延長なし)'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ix_sessions_session_token', 'sessions', ['session_token'], unique=True)

    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('divisi_instansi', sa.String(255), nullable=False),
        sa.Column('nama_pemohon', sa.String(255), nullable=False),
        sa.Column('unit_bisnis', sa.String(255), nullable=False),
        sa.Column('data_informasi', sa.Text(), nullable=False),
        sa.Column('advisory_diinginkan', sa.Text(), nullable=False),
        sa.Column('jenis_advisory', sa.JSON(), nullable=False,
                  comment='カテゴリコード配列 (例: ["01", "05"])'),
        sa.Column('status', QUESTION_STATUS, nullable=False),
        sa.Column('tanggal_permohonan', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_questions_user_id', 'questions', ['user_id'])
    op.create_index('ix_questions_status', 'questions', ['status'])
    op.create_index('ix_questions_tanggal_permohonan', 'questions', ['tanggal_permohonan'])

    op.create_table(
        'answers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('no_registrasi', sa.String(32), nullable=False, comment='NNN/カテゴリ/年'),
        sa.Column('technical_advisory_note', sa.Text(), nullable=False),
        sa.Column('tanggal_jawaban', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('question_id', name='uq_answers_question'),
        sa.UniqueConstraint('no_registrasi', name='uq_answers_no_registrasi'),
    )
    op.create_index('ix_answers_question_id', 'answers', ['question_id'])
    op.create_index('ix_answers_user_id', 'answers', ['user_id'])

    op.create_table(
        'question_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('field_changed', sa.String(100), nullable=False),
        sa.Column('old_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_question_history_question_id', 'question_history', ['question_id'])
    op.create_index('ix_question_history_created_at', 'question_history', ['created_at'])

    op.create_table(
        'answer_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('answer_id', sa.Integer(),
                  sa.ForeignKey('answers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('old_note', sa.Text(), nullable=True),
        sa.Column('new_note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_answer_history_answer_id', 'answer_history', ['answer_id'])
    op.create_index('ix_answer_history_created_at', 'answer_history', ['created_at'])

    # registration_counters: カテゴリ×年ごとの登録番号カウンター
    op.create_table(
        'registration_counters',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('jenis_advisory', sa.String(2), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('last_number', sa.Integer(), nullable=False, server_default=sa.text('0'),
                  comment='最後に払い出した連番'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('jenis_advisory', 'year', name='uq_registration_counter_scope'),
    )


def downgrade() -> None:
    op.drop_table('registration_counters')
    op.drop_table('answer_history')
    op.drop_table('question_history')
    op.drop_table('answers')
    op.drop_table('questions')
    op.drop_table('sessions')
    op.drop_table('users')
    QUESTION_STATUS.drop(op.get_bind(), checkfirst=True)
    USER_ROLE.drop(op.get_bind(), checkfirst=True)
