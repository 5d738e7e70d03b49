"""Database schema DDL for cinehub."""

USERS_TABLE_DDL = """
CREATE TABLE users (
  id          UUID PRIMARY KEY,
  name        TEXT NOT NULL,
  email       TEXT NOT NULL UNIQUE,
  password    TEXT NOT NULL,
  created_at  TIMESTAMPTZ NOT NULL DEFAULT now(),
  updated_at  TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

MOVIES_TABLE_DDL = """
CREATE TABLE movies (
  id                    UUID PRIMARY KEY,
  user_id               UUID NOT NULL REFERENCES users (id) ON DELETE CASCADE,

  title                 TEXT NOT NULL,
  original_title        TEXT,
  subtitle              TEXT,
  description           TEXT NOT NULL,
  release_date          TIMESTAMPTZ NOT NULL,
  duration              INT NOT NULL CHECK (duration > 0 AND duration <= 1000),
  status                TEXT,
  age_rating            TEXT,

  budget                NUMERIC(15, 2),
  revenue               NUMERIC(15, 2),
  profit                NUMERIC(15, 2),

  poster_url            TEXT,
  backdrop_url          TEXT,
  trailer_url           TEXT,

  genres                TEXT[] NOT NULL DEFAULT '{}',
  production_companies  TEXT[] NOT NULL DEFAULT '{}',
  spoken_languages      TEXT[] NOT NULL DEFAULT '{}',

  vote_average          NUMERIC(3, 1),
  vote_count            INT,
  popularity            NUMERIC(10, 3),

  created_at            TIMESTAMPTZ NOT NULL DEFAULT now(),
  updated_at            TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX idx_movies_user_id
ON movies (user_id);

CREATE INDEX idx_movies_release_date
ON movies (release_date);
"""

JOBS_TABLE_DDL = """
CREATE TABLE jobs (
  id               TEXT PRIMARY KEY,
  queue            TEXT NOT NULL,
  name             TEXT NOT NULL,

  status           TEXT NOT NULL CHECK (status IN ('delayed', 'active', 'completed', 'failed')),
  payload          JSONB NOT NULL,

  run_at           TIMESTAMPTZ NOT NULL,

  attempts         INT NOT NULL DEFAULT 0,
  max_attempts     INT NOT NULL,
  backoff_policy   JSONB NOT NULL,

  lease_expires_at TIMESTAMPTZ,
  last_error       JSONB,

  created_at       TIMESTAMPTZ NOT NULL DEFAULT now(),
  updated_at       TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX idx_jobs_due
ON jobs (queue, run_at)
WHERE status = 'delayed';

-- Index for lease reaper to find expired leases efficiently
CREATE INDEX idx_jobs_expired_leases
ON jobs (lease_expires_at)
WHERE status = 'active' AND lease_expires_at IS NOT NULL;
"""

SCHEMA_DDL = USERS_TABLE_DDL + MOVIES_TABLE_DDL + JOBS_TABLE_DDL
