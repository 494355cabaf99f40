"""Voice Mate - voice diary capture, task classification and reminders."""
