from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2a7d9b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False, unique=True),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('date_created', sa.DateTime(), server_default=sa.func.current_timestamp(), nullable=False)
    )

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.current_timestamp(), nullable=False)
    )

    op.create_table(
        'quizzes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('time_limit', sa.Integer(), nullable=True),
        sa.Column('passing_score', sa.Integer(), nullable=True),
        sa.Column('randomize_questions', sa.Boolean(), nullable=False),
        sa.Column('max_attempts', sa.Integer(), nullable=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=True)
    )

    op.create_table(
        'quiz_questions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('quiz_id', sa.Integer(), sa.ForeignKey('quizzes.id'), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('question_type', sa.String(length=20), nullable=False),
        sa.Column('point_weight', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False)
    )

    op.create_table(
        'question_options',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('quiz_questions.id'), nullable=False),
        sa.Column('option_text', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False)
    )

    op.create_table(
        'quiz_attempts',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('quiz_id', sa.Integer(), sa.ForeignKey('quizzes.id'), nullable=False),
        sa.Column('attempt_number', sa.Integer(), nullable=False),
        sa.Column('state', sa.String(length=20), nullable=False),
        sa.Column('earned_score', sa.Integer(), nullable=False),
        sa.Column('percentage', sa.Integer(), nullable=True),
        sa.Column('passed', sa.Boolean(), nullable=True),
        sa.Column('last_answered_index', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('user_id', 'quiz_id', 'attempt_number', name='uq_attempt_number')
    )

    op.create_table(
        'quiz_attempt_answers',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('attempt_id', sa.String(length=36), sa.ForeignKey('quiz_attempts.id'), nullable=False),
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('quiz_questions.id'), nullable=False),
        sa.Column('selected_option_id', sa.Integer(), nullable=True),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('answered_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('attempt_id', 'question_id', name='uq_answer_per_question')
    )

    op.create_table(
        'engine_warnings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('kind', sa.String(length=50), nullable=False, index=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True, index=True),
        sa.Column('quiz_id', sa.Integer(), nullable=True),
        sa.Column('attempt_id', sa.String(length=36), nullable=True),
        sa.Column('question_id', sa.Integer(), nullable=True),
        sa.Column('reference_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False)
    )


def downgrade():
    op.drop_table('engine_warnings')
    op.drop_table('quiz_attempt_answers')
    op.drop_table('quiz_attempts')
    op.drop_table('question_options')
    op.drop_table('quiz_questions')
    op.drop_table('quizzes')
    op.drop_table('courses')
    op.drop_table('users')
