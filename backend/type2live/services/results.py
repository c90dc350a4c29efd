from type2live.models import Player, Room, WordSubmission


def build_results(room: Room) -> dict:
    """Summarise the latest game in a room.

    Players are ranked by score. Accuracy is the percentage of valid
    submissions, rounded to one decimal. Max combo takes the larger of the
    player's live max combo and any combo logged with a submission.
    """
    game = room.current_game
    players = Player.query.filter_by(room_id=room.id).order_by(Player.score.desc(), Player.id).all()
    submissions = WordSubmission.query.filter_by(game_id=game.id).all() if game else []

    results = []
    for rank, player in enumerate(players, start=1):
        mine = [s for s in submissions if s.player_id == player.id]
        correct = sum(1 for s in mine if s.is_valid)
        accuracy = round(correct / len(mine) * 100, 1) if mine else 0.0
        results.append({
            'id': player.id,
            'name': player.name,
            'score': player.score,
            'rank': rank,
            'word_count': correct,
            'max_combo': max([player.max_combo or 0] + [s.combo_at_time for s in mine]),
            'accuracy': accuracy,
            'total_submissions': len(mine),
            'correct_submissions': correct,
        })

    duration = None
    if game and game.started_at and game.ended_at:
        duration = round(game.ended_at - game.started_at)

    top_performers = None
    if results:
        top_performers = {
            'highest_score': max(results, key=lambda r: r['score'])['id'],
            'most_words': max(results, key=lambda r: r['word_count'])['id'],
            'best_combo': max(results, key=lambda r: r['max_combo'])['id'],
            'best_accuracy': max(results, key=lambda r: r['accuracy'])['id'],
        }

    return {
        'room_code': room.room_code,
        'game_id': game.id if game else None,
        'status': room.status,
        'end_reason': game.end_reason if game else None,
        'total_players': len(results),
        'game_duration_sec': duration,
        'results': results,
        'top_performers': top_performers,
    }
