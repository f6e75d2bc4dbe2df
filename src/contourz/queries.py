"""GraphQL query documents.

Collections follow pg_graphql naming: ``<table>Collection`` with relay-style
``edges { node }`` pagination. Row level security scopes every query to the
signed-in user.
"""

GET_CONTACTS = """
query GetContacts {
  contactsCollection(orderBy: { created_at: DescNullsLast }) {
    edges {
      node {
        id
        name
        phone
        email
        is_completed_profile
        designation
        company_name
        tags
        created_at
      }
    }
  }
}
"""

GET_CONTACT_DASHBOARD = """
query GetContactDashboard($id: UUID!) {
  contactsCollection(filter: { id: { eq: $id } }) {
    edges {
      node {
        id
        name
        phone
        email
        notes
        is_completed_profile
        designation
        company_name
        tags
        created_at
        tasksCollection {
          edges {
            node {
              id
              contact_id
              title
              description
              status
              priority
              due_date
              reminder_at
              completed_at
              created_at
            }
          }
        }
        meetingsCollection {
          edges {
            node {
              id
              contact_id
              title
              meeting_type
              status
              scheduled_start
              scheduled_end
              location
              notes
              outcome
              reminder_at
              created_at
            }
          }
        }
        transactionsCollection {
          edges {
            node {
              id
              contact_id
              amount
              currency
              category
              status
              transaction_date
              reference_id
              notes
              created_at
            }
          }
        }
      }
    }
  }
}
"""

GET_ALL_TASKS = """
query GetAllTasks {
  tasksCollection(orderBy: { created_at: DescNullsLast }) {
    edges {
      node {
        id
        title
        description
        status
        priority
        due_date
        created_at
        contact: contacts {
          id
          name
        }
      }
    }
  }
}
"""

GET_TASK_DETAILS = """
query GetTaskDetails($id: UUID!) {
  tasksCollection(filter: { id: { eq: $id } }) {
    edges {
      node {
        id
        title
        description
        status
        priority
        due_date
        reminder_at
        completed_at
        created_at
        contact: contacts {
          id
          name
          company_name
          designation
        }
      }
    }
  }
}
"""

GET_ALL_MEETINGS = """
query GetAllMeetings {
  meetingsCollection(orderBy: { scheduled_start: DescNullsLast }) {
    edges {
      node {
        id
        title
        meeting_type
        status
        scheduled_start
        location
        created_at
        contact: contacts {
          id
          name
        }
      }
    }
  }
}
"""

GET_MEETING_DETAILS = """
query GetMeetingDetails($id: UUID!) {
  meetingsCollection(filter: { id: { eq: $id } }) {
    edges {
      node {
        id
        title
        meeting_type
        status
        scheduled_start
        scheduled_end
        location
        notes
        outcome
        created_at
        contact: contacts {
          id
          name
          company_name
          designation
        }
      }
    }
  }
}
"""

GET_ALL_TRANSACTIONS = """
query GetAllTransactions {
  transactionsCollection(orderBy: { transaction_date: DescNullsLast }) {
    edges {
      node {
        id
        amount
        currency
        category
        status
        transaction_date
        notes
        created_at
        contact: contacts {
          id
          name
        }
      }
    }
  }
}
"""

GET_TRANSACTION_DETAILS = """
query GetTransactionDetails($id: UUID!) {
  transactionsCollection(filter: { id: { eq: $id } }) {
    edges {
      node {
        id
        amount
        currency
        category
        status
        transaction_date
        reference_id
        notes
        created_at
        contact: contacts {
          id
          name
          company_name
          designation
        }
      }
    }
  }
}
"""

GET_PROFILE = """
query GetProfile($userId: UUID!) {
  profilesCollection(filter: { id: { eq: $userId } }) {
    edges {
      node {
        id
        username
        display_name
        bio
        avatar_url
        is_public
        created_at
        is_complete
        profile_tagsCollection {
          edges {
            node {
              id
              tags {
                id
                name
                normalized_name
                tag_type
                usage_count
              }
            }
          }
        }
      }
    }
  }
}
"""

SUGGEST_TAGS = """
query SuggestTags($type: String!, $query: String!) {
  tagsCollection(
    filter: {
      tag_type: { eq: $type }
      normalized_name: { ilike: $query }
      is_active: { eq: true }
    }
    orderBy: { usage_count: Desc }
    first: 20
  ) {
    edges {
      node {
        id
        name
        normalized_name
        tag_type
        usage_count
      }
    }
  }
}
"""
