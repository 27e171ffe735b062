"""Constants for the FocusNotes integration."""
from datetime import timedelta

DOMAIN = "focusnotes"
PLATFORMS = ["todo", "sensor", "button", "text"]

CONF_NOTIFY_SERVICE = "notify_service"

STORAGE_VERSION = 1
STORAGE_KEY = f"{DOMAIN}_data"
SETTINGS_STORAGE_KEY = f"{DOMAIN}_settings"

# Effort tiers
EFFORT_EASY = "easy"
EFFORT_MEDIUM = "medium"
EFFORT_HARD = "hard"
EFFORT_XP = {EFFORT_EASY: 5, EFFORT_MEDIUM: 10, EFFORT_HARD: 15}

# Levels
LEVEL_THRESHOLDS = [0, 100, 250, 500, 1000, 2000, 3000, 5000, 7500, 10000]
LEVEL_TITLES = {
    1: "Beginner",
    2: "Explorer",
    3: "Master",
    4: "Champion",
    5: "Expert",
    6: "Guru",
    7: "Virtuoso",
    8: "Legend",
    9: "Titan",
    10: "Mythic",
}
MAX_LEVEL = len(LEVEL_THRESHOLDS)

# Streaks
STREAK_COMPLETION_RATIO = 0.90
FREEZE_TOKEN_INTERVAL = 7
STREAK_MILESTONES = (7, 14, 30)

# Pomodoro
POMODORO_DURATION = timedelta(minutes=25)
POMODORO_SESSION_XP = 5
POMODORO_DAILY_XP_CAP = 20

# Reminders
TASK_REMINDER_HOUR = 9
TASK_REMINDER_LEAD = timedelta(minutes=30)
MIN_REMINDER_LEAD = timedelta(minutes=2)
EARLY_BIRD_HOUR = 8
DAILY_REMINDER_ID = f"{DOMAIN}_daily_streak_reminder"
DEFAULT_REMINDER_TIME = "19:00"

# Notification kinds
NOTIFY_POMODORO_START = "pomodoro-start"
NOTIFY_POMODORO_END = "pomodoro-end"
NOTIFY_TASK_REMINDER = "task-reminder"
NOTIFY_STREAK_REMINDER = "streak-reminder"
NOTIFY_STREAK_MILESTONE = "streak-milestone"
NOTIFY_ACHIEVEMENT = "achievement-unlocked"

# Notification categories, each gated by a settings toggle
CATEGORY_TASK = "task"
CATEGORY_POMODORO = "pomodoro"
CATEGORY_STREAK = "streak"
CATEGORY_MILESTONE = "milestone"
CATEGORY_ACHIEVEMENT = "achievement"

# Feedback
SOUND_TASK_COMPLETE = "task-complete"
SOUND_POMODORO_END = "pomodoro-end"
SOUND_NOTIFICATION = "notification"
VIBRATE_REMINDER = (0, 150)
VIBRATE_POMODORO = (0, 250, 100, 250)
VIBRATE_CELEBRATION = (0, 300, 150, 300)

# Bus events
EVENT_FEEDBACK = f"{DOMAIN}_feedback"
EVENT_BADGE_EARNED = f"{DOMAIN}_badge_earned"
EVENT_DAY_ENDED = f"{DOMAIN}_day_ended"

# Settings keys
CONF_ENABLED = "enabled"
CONF_SOUND_ENABLED = "sound_enabled"
CONF_VIBRATION_ENABLED = "vibration_enabled"
CONF_TASK_REMINDERS = "task_reminders"
CONF_POMODORO_ALERTS = "pomodoro_alerts"
CONF_STREAK_REMINDERS = "streak_reminders"
CONF_STREAK_MILESTONES = "streak_milestones"
CONF_ACHIEVEMENT_ALERTS = "achievement_alerts"
CONF_REMINDER_TIME = "reminder_time"

# Services
SERVICE_ADD_TASK = "add_task"
SERVICE_UPDATE_TASK = "update_task"
SERVICE_TOGGLE_TASK = "toggle_task"
SERVICE_DELETE_TASK = "delete_task"
SERVICE_START_POMODORO = "start_pomodoro"
SERVICE_STOP_POMODORO = "stop_pomodoro"
SERVICE_END_DAY = "end_day"
SERVICE_ADD_NOTE = "add_note"
SERVICE_UPDATE_NOTE = "update_note"
SERVICE_DELETE_NOTE = "delete_note"

# Timers
DAY_CHECK_INTERVAL = timedelta(seconds=30)
POMODORO_GRACE = timedelta(seconds=1)
