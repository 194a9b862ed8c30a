"""Analysis stages: mining, friction, synthesis, prioritization."""
