"""RLS policies for profiles, businesses, reviews and user_pins

Revision ID: b2e4d6f8a0c3
Revises: a1f3c5e7b9d2
Create Date: 2026-03-02

Clients talk to Supabase directly with the anon key + user JWT, so the
ownership rules live in the database too:
- businesses and reviews are readable by everyone (anon and authenticated)
- a user may insert/update/delete only their own source='user' reviews
- profiles and user_pins are readable and writable only by their owner
Businesses and Yelp reviews are written by the API with the service role,
which bypasses RLS.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "b2e4d6f8a0c3"
down_revision: Union[str, None] = "a1f3c5e7b9d2"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# (table, policy name, statement); dropped before create so the migration can be re-run.
POLICIES = (
    ("businesses", "businesses_select_public", "FOR SELECT TO anon, authenticated USING (true)"),
    ("reviews", "reviews_select_public", "FOR SELECT TO anon, authenticated USING (true)"),
    (
        "reviews",
        "reviews_insert_own",
        "FOR INSERT TO authenticated WITH CHECK (auth.uid() = user_id AND source = 'user')",
    ),
    (
        "reviews",
        "reviews_update_own",
        "FOR UPDATE TO authenticated USING (auth.uid() = user_id AND source = 'user') "
        "WITH CHECK (auth.uid() = user_id AND source = 'user')",
    ),
    (
        "reviews",
        "reviews_delete_own",
        "FOR DELETE TO authenticated USING (auth.uid() = user_id AND source = 'user')",
    ),
    ("profiles", "profiles_select_own", "FOR SELECT TO authenticated USING (auth.uid() = id)"),
    ("profiles", "profiles_insert_own", "FOR INSERT TO authenticated WITH CHECK (auth.uid() = id)"),
    (
        "profiles",
        "profiles_update_own",
        "FOR UPDATE TO authenticated USING (auth.uid() = id) WITH CHECK (auth.uid() = id)",
    ),
    ("user_pins", "user_pins_all_own", "FOR ALL TO authenticated USING (auth.uid() = user_id) WITH CHECK (auth.uid() = user_id)"),
)

TABLES = ("profiles", "businesses", "reviews", "user_pins")


def upgrade() -> None:
    conn = op.get_bind()
    for table in TABLES:
        conn.execute(sa.text(f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY"))
    for table, name, statement in POLICIES:
        conn.execute(sa.text(f'DROP POLICY IF EXISTS "{name}" ON public.{table}'))
        conn.execute(sa.text(f"CREATE POLICY {name} ON public.{table} {statement}"))


def downgrade() -> None:
    conn = op.get_bind()
    for table, name, _ in POLICIES:
        conn.execute(sa.text(f'DROP POLICY IF EXISTS "{name}" ON public.{table}'))
    for table in TABLES:
        conn.execute(sa.text(f"ALTER TABLE public.{table} DISABLE ROW LEVEL SECURITY"))
