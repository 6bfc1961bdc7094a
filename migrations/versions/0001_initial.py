"""initial relief tables

Revision ID: 0001
Revises:
Create Date: 2026-01-12

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

teacher_type = sa.Enum('REGULAR', 'PERMANENT_RELIEF', name='teachertype')
week_type = sa.Enum('ALL', 'ODD', 'EVEN', name='weektype')

def upgrade():
    op.create_table('teacher',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', teacher_type, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_teacher_name', 'teacher', ['name'])

    op.create_table('period',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.UniqueConstraint('number', name='uq_period_number'),
    )

    op.create_table('timetable_slot',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('teacher.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('period_id', sa.Integer(), sa.ForeignKey('period.id', ondelete='CASCADE'), nullable=False),
        sa.Column('week_type', week_type, nullable=False),
        sa.Column('class_name', sa.String(50), nullable=False),
        sa.Column('subject', sa.String(120), nullable=False),
        sa.UniqueConstraint('teacher_id', 'day_of_week', 'period_id', 'week_type',
                            name='uq_slot_teacher_day_period_week'),
    )
    op.create_index('ix_slot_day_week', 'timetable_slot', ['day_of_week', 'week_type'])

    op.create_table('sick_report',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('teacher.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_sick_report_teacher_id', 'sick_report', ['teacher_id'])
    op.create_index('ix_sick_report_range', 'sick_report', ['start_date', 'end_date'])

    op.create_table('relief_assignment',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sick_report_id', sa.Integer(), sa.ForeignKey('sick_report.id', ondelete='CASCADE'), nullable=False),
        sa.Column('timetable_slot_id', sa.Integer(), sa.ForeignKey('timetable_slot.id', ondelete='CASCADE'), nullable=False),
        sa.Column('covering_teacher_id', sa.Integer(), sa.ForeignKey('teacher.id', ondelete='CASCADE'), nullable=False),
        sa.Column('period_id', sa.Integer(), sa.ForeignKey('period.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('covering_teacher_id', 'date', 'period_id', name='uq_relief_teacher_date_period'),
        sa.UniqueConstraint('timetable_slot_id', 'date', name='uq_relief_slot_date'),
    )
    op.create_index('ix_relief_assignment_date', 'relief_assignment', ['date'])

def downgrade():
    op.drop_table('relief_assignment')
    op.drop_table('sick_report')
    op.drop_table('timetable_slot')
    op.drop_table('period')
    op.drop_table('teacher')
    bind = op.get_bind()
    if bind.dialect.name != "sqlite":
        week_type.drop(bind, checkfirst=True)
        teacher_type.drop(bind, checkfirst=True)
