"""File classification and directory aggregation core for a storage file manager."""
