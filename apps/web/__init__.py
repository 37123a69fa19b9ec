"""Server-rendered pages: dashboard, member and agency management, onboarding."""
