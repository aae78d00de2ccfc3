from chatroom.posts.post import Post


def test_new_post_has_no_id_and_no_time():
    post = Post(content="hello", user_id=3)
    assert post.post_id == -1
    assert post.create_time == ""


def test_to_json_carries_all_fields():
    post = Post(content="hi there", user_id=7, post_id=12, create_time="2024-01-02 03:04:05")
    assert post.to_json() == {
        "post_id": 12,
        "content": "hi there",
        "user_id": 7,
        "create_time": "2024-01-02 03:04:05",
    }


def test_to_json_round_trips_into_post():
    post = Post(content="文本", user_id=1, post_id=2, create_time="t")
    assert Post(**post.to_json()) == post