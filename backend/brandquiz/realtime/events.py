# Inbound (client -> server)
CREATE_ROOM = "create_room"
JOIN_ROOM = "join_room"
START_GAME = "start_game"
SUBMIT_ANSWER = "submit_answer"
TIME_UP = "time_up"
NEXT_QUESTION = "next_question"
LEAVE_ROOM = "leave_room"
SUBMIT_SOLO_SCORE = "submit_solo_score"
GET_SOLO_LEADERBOARD = "get_solo_leaderboard"
GET_GLOBAL_LEADERBOARD = "get_global_leaderboard"
GET_DAILY_LEADERBOARD = "get_daily_leaderboard"
GET_MULTIPLAYER_LEADERBOARD = "get_multiplayer_leaderboard"
ADMIN_LOGIN = "admin_login"
ADMIN_DELETE_SCORE = "admin_delete_score"
ADMIN_CLEAR_LEADERBOARD = "admin_clear_leaderboard"

# Outbound (server -> client)
PLAYER_JOINED = "player_joined"
LOBBY_UPDATE = "lobby_update"
GAME_STARTED = "game_started"
NEW_QUESTION = "new_question"
PLAYER_ANSWERED = "player_answered"
QUESTION_RESULT = "question_result"
QUESTION_ENDED = "question_ended"
GAME_OVER = "game_over"
