# gymtrack/core/constants.py
"""Names shared between the cloud function and the device relay.

The topic and channel id must match byte for byte on both sides, otherwise
devices never see the message. Keep them here only.
"""

# Firestore collections
COLLECTION_ROUTINES = "rutinas"
COLLECTION_PREDEFINED_ROUTINES = "rutinasPredefinidas"
COLLECTION_SENT_NOTIFICATIONS = "notificacionesEnviadas"

# FCM broadcast topic
NEW_ROUTINES_TOPIC = "nuevas_rutinas"

# Local notification channel
CHANNEL_ID = "gymtrack_channel"
CHANNEL_NAME = "GymTrack Notifications"
CHANNEL_DESCRIPTION = "Canal para recordatorios y consejos"

# Platform importance / priority levels
IMPORTANCE_DEFAULT = 3
PRIORITY_DEFAULT = 0
PRIORITY_HIGH = 1

# Runtime permission and the API levels where things change
POST_NOTIFICATIONS = "android.permission.POST_NOTIFICATIONS"
SDK_NOTIFICATION_PERMISSION = 33
SDK_NOTIFICATION_CHANNELS = 26

# Periodic reminder
REMINDER_WORK_NAME = "daily_gymtrack_notification"
REMINDER_INTERVAL_DAYS = 1

# Intent flags for the reminder deep link
FLAG_ACTIVITY_NEW_TASK = "NEW_TASK"
FLAG_ACTIVITY_CLEAR_TASK = "CLEAR_TASK"

# New predefined routine message
NEW_ROUTINE_TITLE = "💪 ¡Nueva rutina disponible!"
NEW_ROUTINE_BODY = "Se ha publicado {name}"
ROUTINE_NAME_PLACEHOLDER = "una rutina"

# Firestore field names
FIELD_ROUTINE_NAME = "nombreRutina"
FIELD_USER_ID = "userId"
FIELD_CREATED_AT = "fechaCreacion"
FIELD_EXERCISES = "ejercicios"
FIELD_FAVORITE = "esFavorita"

# owner id written on predefined routines
ADMIN_OWNER_ID = "admin"
