"""Weekly ranking of tracked competitive programmers ("rivals")."""
