"""spotgen: build playlists from a small directive language."""
